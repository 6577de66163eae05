"""Batch scanning of captured label images."""

import csv
import io
import json
import time
from dataclasses import dataclass, field
from pathlib import Path

from shipping_label.models.label import LabelRecord
from shipping_label.scanner import LabelScanner, ScanOutcome

# camelCase record keys, in LabelRecord order
RECORD_KEYS = list(LabelRecord().model_dump(by_alias=True))
CSV_COLUMNS = ["image_path", *RECORD_KEYS, "valid", "missing_fields", "error"]


@dataclass
class BatchResult:
    """Scanned label rows and the images that could not be scanned."""

    results: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    total_time_ms: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def succeeded(self) -> int:
        """Images that were scanned, whether or not the label validated."""
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def valid(self) -> int:
        """Scanned labels that passed validation."""
        return sum(1 for row in self.results if row.get("valid"))


class BatchProcessor:
    """Scans a list of label images, one failure never stopping the rest."""

    IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}

    def __init__(self, scanner: LabelScanner):
        self._scanner = scanner

    def process(self, image_paths: list[Path]) -> BatchResult:
        """
        Scan every image in order.

        Labels failing validation are still reported as rows with
        ``valid: False`` and their partial record; only images that cannot
        be read or analyzed end up in ``errors``.
        """
        batch = BatchResult()
        start_time = time.perf_counter()

        for path in image_paths:
            try:
                outcome = self._scanner.scan(path)
            except Exception as e:
                batch.errors.append({"image_path": str(path), "error": str(e)})
                continue
            batch.results.append(self._row(path, outcome))

        batch.total_time_ms = round((time.perf_counter() - start_time) * 1000, 2)
        return batch

    def _row(self, path: Path, outcome: ScanOutcome) -> dict:
        validation = outcome.validation
        record = validation.record or LabelRecord.from_scan(
            outcome.result.label, outcome.result.barcode_value
        )
        return {
            "image_path": str(path),
            **record.model_dump(by_alias=True),
            "valid": validation.ok,
            "missing_fields": validation.missing_fields,
        }

    def collect_images(self, inputs: list[Path]) -> list[Path]:
        """Expand directories (non-recursively) and keep image files, sorted."""
        candidates = []
        for path in inputs:
            candidates.extend(path.iterdir() if path.is_dir() else [path])
        return sorted(
            {
                path
                for path in candidates
                if path.is_file() and path.suffix.lower() in self.IMAGE_EXTENSIONS
            }
        )

    def to_json(self, result: BatchResult) -> str:
        summary = {
            name: getattr(result, name)
            for name in ("total", "succeeded", "valid", "failed", "total_time_ms")
        }
        return json.dumps(
            {"metadata": summary, "results": result.results, "errors": result.errors},
            indent=2,
            ensure_ascii=False,
        )

    def to_csv(self, result: BatchResult) -> str:
        """One row per image: scanned labels first, then failures."""
        output = io.StringIO()
        writer = csv.DictWriter(
            output, fieldnames=CSV_COLUMNS, restval="", extrasaction="ignore"
        )
        writer.writeheader()
        for row in result.results:
            missing = ";".join(row.get("missing_fields", []))
            writer.writerow({**row, "missing_fields": missing})
        writer.writerows(result.errors)
        return output.getvalue()
