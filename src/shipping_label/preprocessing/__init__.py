"""Optional image filters applied before recognition."""

from shipping_label.preprocessing.edges import EdgeFilter
from shipping_label.preprocessing.label_cropper import LabelCropper, order_corners

__all__ = ["EdgeFilter", "LabelCropper", "order_corners"]
