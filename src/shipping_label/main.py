"""CLI entry point for the shipping label scanner."""

import logging
import threading
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from shipping_label.barcode.pyzbar_reader import PyzbarBarcodeReader
from shipping_label.batch import BatchProcessor
from shipping_label.camera import LatestFrameSource
from shipping_label.coordinator import FrameAnalysisCoordinator
from shipping_label.extractor.normalizer import normalize
from shipping_label.models.label import ScanResult
from shipping_label.ocr.paddle_ocr import PaddleOCRRecognizer
from shipping_label.preprocessing import EdgeFilter, LabelCropper
from shipping_label.scanner import LabelScanner
from shipping_label.validator import ConsoleBellAlert, LabelValidator, ValidationResult

app = typer.Typer(
    name="labelscan",
    help="Scan shipping labels and extract structured records.",
    add_completion=False,
)
console = Console()

LangOption = Annotated[
    str,
    typer.Option(
        "--lang",
        "-l",
        help="OCR language (default: en)",
    ),
]
EdgesOption = Annotated[
    bool,
    typer.Option(
        "--edges",
        help="Run recognition on a Canny edge map of the image",
    ),
]
BeepOption = Annotated[
    bool,
    typer.Option(
        "--beep/--no-beep",
        help="Ring the terminal bell when a label fails validation",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
]


@app.command()
def scan(
    image_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the captured label image",
            exists=True,
            readable=True,
        ),
    ],
    output_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output raw JSON instead of formatted output",
        ),
    ] = False,
    crop: Annotated[
        bool,
        typer.Option(
            "--crop/--no-crop",
            help="Detect and crop the label region before recognition",
        ),
    ] = True,
    lang: LangOption = "en",
    edges: EdgesOption = False,
    beep: BeepOption = True,
    verbose: VerboseOption = False,
):
    """Scan a captured label image and print its record."""
    _configure_logging(verbose)
    try:
        with _create_coordinator(lang, edges) as coordinator:
            scanner = LabelScanner(
                coordinator,
                _create_validator(beep),
                cropper=LabelCropper() if crop else None,
            )
            outcome = scanner.scan(image_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if output_json:
        print(outcome.validation.output)
    else:
        _print_validation(outcome.validation)
        console.print(f"[dim]Processed in {outcome.processing_time_ms:.0f}ms[/dim]")

    if not outcome.validation.ok:
        raise typer.Exit(1)


@app.command()
def watch(
    camera: Annotated[
        str,
        typer.Option(
            "--camera",
            "-c",
            help="Camera index or stream URL",
        ),
    ] = "0",
    lang: LangOption = "en",
    edges: EdgesOption = False,
    beep: BeepOption = True,
    verbose: VerboseOption = False,
):
    """Watch the camera, capture each detected label and print its record."""
    _configure_logging(verbose)
    detected = threading.Event()
    validator = _create_validator(beep)
    device = int(camera) if camera.isdigit() else camera

    try:
        source = LatestFrameSource(device)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    coordinator = _create_coordinator(lang, edges, on_label_detected=detected.set)
    console.print("Watching for labels, press Ctrl-C to stop...")
    pending = None
    try:
        for frame in source.frames():
            if detected.is_set():
                # The frame after detection is the capture
                detected.clear()
                result = coordinator.analyze_image(frame).result(timeout=60)
                result = result or ScanResult()
                _print_validation(validator.validate(result.label, result.barcode_value))
                coordinator.resume()
                pending = None
            elif pending is None or pending.done():
                pending = coordinator.analyze_frame(frame)
    except KeyboardInterrupt:
        console.print("Stopping...")
    finally:
        coordinator.shutdown()
        source.close()


@app.command()
def batch(
    inputs: Annotated[
        list[Path],
        typer.Argument(
            help="Image files or directories to process",
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path (JSON or CSV)",
        ),
    ],
    format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: json or csv",
        ),
    ] = "json",
    crop: Annotated[
        bool,
        typer.Option(
            "--crop/--no-crop",
            help="Detect and crop the label region before recognition",
        ),
    ] = True,
    lang: LangOption = "en",
    verbose: VerboseOption = False,
):
    """Scan multiple captured label images."""
    _configure_logging(verbose)
    format = format.lower()
    if format not in ("json", "csv"):
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Use 'json' or 'csv'.")
        raise typer.Exit(1)

    with _create_coordinator(lang, edges=False) as coordinator:
        scanner = LabelScanner(
            coordinator,
            LabelValidator(),
            cropper=LabelCropper() if crop else None,
        )
        processor = BatchProcessor(scanner)

        images = processor.collect_images(inputs)
        if not images:
            console.print("[yellow]Warning:[/yellow] No images found to process.")
            raise typer.Exit(0)

        console.print(f"Processing {len(images)} image(s)...")
        result = processor.process(images)

    if format == "csv":
        content = processor.to_csv(result)
    else:
        content = processor.to_json(result)

    output.write_text(content, encoding="utf-8")

    console.print(
        f"[green]Done:[/green] {result.succeeded} scanned ({result.valid} valid), "
        f"{result.failed} failed, {result.total_time_ms:.1f}ms total"
    )
    console.print(f"Output: {output}")


@app.command()
def ocr(
    image_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the label image",
            exists=True,
            readable=True,
        ),
    ],
    lang: LangOption = "en",
):
    """Print the recognized text blocks in reading order."""
    import cv2

    image = cv2.imread(str(image_path))
    if image is None:
        console.print(f"[red]Error:[/red] Cannot decode image: {image_path}")
        raise typer.Exit(1)

    recognizer = PaddleOCRRecognizer(lang=lang)
    try:
        document = normalize(recognizer.recognize(image))
    finally:
        recognizer.close()

    text = "\n\n".join("\n".join(block) for block in document)
    rprint(Panel(text or "(no text)", title="OCR Result", border_style="blue"))


@app.command()
def version():
    """Show version information."""
    from shipping_label import __version__

    console.print(f"labelscan version {__version__}")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _create_coordinator(
    lang: str, edges: bool, on_label_detected=None
) -> FrameAnalysisCoordinator:
    """Create a coordinator wired to the PaddleOCR and zbar backends."""
    return FrameAnalysisCoordinator(
        PaddleOCRRecognizer(lang=lang),
        PyzbarBarcodeReader(),
        on_label_detected=on_label_detected,
        preprocess=EdgeFilter() if edges else None,
    )


def _create_validator(beep: bool) -> LabelValidator:
    return LabelValidator(alert=ConsoleBellAlert() if beep else None)


def _print_validation(validation: ValidationResult) -> None:
    """Print a validated record, or the diagnostic."""
    from rich.table import Table

    console.print()
    if not validation.ok:
        console.print(Panel(validation.message, title="Rescan needed", border_style="red"))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    for key, value in validation.record.model_dump(by_alias=True).items():
        table.add_row(key, value or "[dim]-[/dim]")
    console.print(Panel(table, title="Label", border_style="green"))
    console.print()


if __name__ == "__main__":
    app()
