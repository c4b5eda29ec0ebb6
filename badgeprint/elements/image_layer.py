# elements/image_layer.py

from dataclasses import dataclass
from typing import Tuple

from badgeprint.constants import CARD_HEIGHT, CARD_WIDTH, FILTER_RANGE, LAYER_KINDS, OPACITY_RANGE
from badgeprint.elements.base_element import Element
from badgeprint.utils.geometry import box_contains, clamp, clamp_percent, layer_box


@dataclass
class ImageLayer(Element):
    """
    The photo or signature region of a side. x,y is the rectangle center,
    w,h its size, all in percent of the card.
    """
    kind: str = 'photo'
    x: float = 50.0
    y: float = 50.0
    w: float = 40.0
    h: float = 25.0
    overlay_color: str = '#000000'
    overlay_opacity: float = 0
    brightness: float = 100
    contrast: float = 100
    colorize: bool = False
    colorize_color: str = '#000000'

    def clamp(self):
        super().clamp()
        if self.kind not in LAYER_KINDS:
            raise ValueError(f"Unknown layer kind '{self.kind}', expected one of {LAYER_KINDS}")
        self.x = clamp_percent(self.x)
        self.y = clamp_percent(self.y)
        self.w = clamp_percent(self.w)
        self.h = clamp_percent(self.h)
        self.overlay_opacity = clamp(self.overlay_opacity, *OPACITY_RANGE)
        self.brightness = clamp(self.brightness, *FILTER_RANGE)
        self.contrast = clamp(self.contrast, *FILTER_RANGE)

    @property
    def is_signature(self) -> bool:
        return self.kind == 'sig'

    @property
    def recolors(self) -> bool:
        """Signature recolor replaces brightness/contrast filtering when active."""
        return self.is_signature and self.colorize

    def get_bbox(self, width: float = CARD_WIDTH, height: float = CARD_HEIGHT) -> Tuple[int, int, int, int]:
        return layer_box(self.x, self.y, self.w, self.h, width, height)

    def contains_point(self, x: float, y: float, width: float = CARD_WIDTH, height: float = CARD_HEIGHT) -> bool:
        return box_contains(self.get_bbox(width, height), x, y)
