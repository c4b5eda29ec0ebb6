# elements/text_field.py

from dataclasses import dataclass
from typing import Any, Dict

from badgeprint.constants import ALIGNMENTS, FONT_SIZE_RANGE, OPACITY_RANGE
from badgeprint.elements.base_element import Element
from badgeprint.utils.geometry import anchor_percent_x, clamp, clamp_percent


@dataclass
class TextField(Element):
    """
    One positioned text element on a side.

    x,y are percentages of the card. For left/center alignment x is measured
    from the left edge; for right alignment it is measured from the right
    edge. y is the top of the first line.
    """
    field_id: str = ''
    label: str = ''
    value: str = ''
    x: float = 50.0
    y: float = 50.0
    font_size: float = 12
    color: str = '#000000'
    bold: bool = False
    italic: bool = False
    align: str = 'left'
    bg_color: str = '#ffffff'
    bg_opacity: float = 0

    def clamp(self):
        super().clamp()
        self.x = clamp_percent(self.x)
        self.y = clamp_percent(self.y)
        self.font_size = clamp(self.font_size, *FONT_SIZE_RANGE)
        self.bg_opacity = clamp(self.bg_opacity, *OPACITY_RANGE)
        if self.align not in ALIGNMENTS:
            self.align = 'left'

    @property
    def anchor_x(self) -> float:
        """Horizontal anchor measured from the left edge, in percent."""
        return anchor_percent_x(self.x, self.align)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['id'] = data.pop('field_id')
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TextField':
        data = dict(data)
        if 'id' in data:
            data['field_id'] = str(data.pop('id'))
        return super().from_dict(data)
