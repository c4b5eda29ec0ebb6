# elements/base_element.py

from dataclasses import dataclass, fields
from typing import Any, Dict

from badgeprint.utils.geometry import clamp


@dataclass
class Element:
    """
    Style shared by every drawable on a side: visibility, an outline stroke
    and a blurred drop shadow. Widths and blur are in editor units.
    """
    visible: bool = True
    stroke_width: float = 0.0
    stroke_color: str = '#000000'
    shadow_blur: float = 0.0
    shadow_color: str = '#000000'

    def __post_init__(self):
        self.clamp()

    def clamp(self):
        """Forces every numeric attribute into its declared range."""
        self.stroke_width = clamp(self.stroke_width, 0.0, float('inf'))
        self.shadow_blur = clamp(self.shadow_blur, 0.0, float('inf'))

    @property
    def has_stroke(self) -> bool:
        return self.stroke_width > 0

    @property
    def has_shadow(self) -> bool:
        return self.shadow_blur > 0

    def to_dict(self) -> Dict[str, Any]:
        """Serializes the element to a plain, JSON-ready dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Builds an element from a dictionary, ignoring unknown keys. Values are clamped."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
