# Import the base element class
from .base_element import Element

# Import the concrete elements
from .text_field import TextField
from .image_layer import ImageLayer

# Import the update structs
from .patches import (
    Patch, TextPatch, GeometryPatch, StrokePatch, ShadowPatch, OverlayPatch,
    FilterPatch, ColorizePatch, VisibilityPatch,
)
