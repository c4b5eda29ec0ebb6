# elements/patches.py
#
# Typed partial updates for fields and layers. Each patch covers one attribute
# group; None means "leave unchanged". Patches write through the element's
# clamp() so out-of-range input is never stored.

from dataclasses import dataclass, fields
from typing import List, Optional, Tuple, Type, Union

from PIL import ImageColor

from badgeprint.elements.base_element import Element
from badgeprint.elements.image_layer import ImageLayer
from badgeprint.elements.text_field import TextField


def _check_color(value: str):
    try:
        ImageColor.getrgb(value)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid color {value!r}") from e


@dataclass(frozen=True)
class Patch:

    def _mapping(self, element: Element) -> List[Tuple[str, object]]:
        """(element attribute, new value) pairs."""
        raise NotImplementedError

    def apply(self, element: Element) -> Element:
        if not isinstance(element, self._targets()):
            raise TypeError(f"{type(self).__name__} does not apply to {type(element).__name__}")
        updates = [(attr, value) for attr, value in self._mapping(element) if value is not None]
        # Colors are checked up front so a rejected patch leaves the element untouched
        for attr, value in updates:
            if attr.endswith('color'):
                _check_color(value)
        for attr, value in updates:
            setattr(element, attr, value)
        element.clamp()
        return element

    def _targets(self) -> Tuple[Type[Element], ...]:
        return (TextField, ImageLayer)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(frozen=True)
class TextPatch(Patch):
    value: Optional[str] = None
    label: Optional[str] = None
    font_size: Optional[float] = None
    color: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    align: Optional[str] = None

    def _targets(self):
        return (TextField,)

    def _mapping(self, element):
        if self.align is not None and self.align not in ('left', 'center', 'right'):
            raise ValueError(f"Invalid alignment '{self.align}'")
        return [('value', self.value), ('label', self.label), ('font_size', self.font_size),
                ('color', self.color), ('bold', self.bold), ('italic', self.italic),
                ('align', self.align)]


@dataclass(frozen=True)
class GeometryPatch(Patch):
    x: Optional[float] = None
    y: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None

    def _mapping(self, element):
        if isinstance(element, TextField) and (self.w is not None or self.h is not None):
            raise TypeError("Text fields have no width/height")
        return [('x', self.x), ('y', self.y), ('w', self.w), ('h', self.h)]


@dataclass(frozen=True)
class StrokePatch(Patch):
    width: Optional[float] = None
    color: Optional[str] = None

    def _mapping(self, element):
        return [('stroke_width', self.width), ('stroke_color', self.color)]


@dataclass(frozen=True)
class ShadowPatch(Patch):
    blur: Optional[float] = None
    color: Optional[str] = None

    def _mapping(self, element):
        return [('shadow_blur', self.blur), ('shadow_color', self.color)]


@dataclass(frozen=True)
class OverlayPatch(Patch):
    """Background box behind a field's text, or flat color over a layer."""
    color: Optional[str] = None
    opacity: Optional[float] = None

    def _mapping(self, element):
        if isinstance(element, TextField):
            return [('bg_color', self.color), ('bg_opacity', self.opacity)]
        return [('overlay_color', self.color), ('overlay_opacity', self.opacity)]


@dataclass(frozen=True)
class FilterPatch(Patch):
    brightness: Optional[float] = None
    contrast: Optional[float] = None

    def _targets(self):
        return (ImageLayer,)

    def _mapping(self, element):
        return [('brightness', self.brightness), ('contrast', self.contrast)]


@dataclass(frozen=True)
class ColorizePatch(Patch):
    enabled: Optional[bool] = None
    color: Optional[str] = None

    def _targets(self):
        return (ImageLayer,)

    def _mapping(self, element):
        return [('colorize', self.enabled), ('colorize_color', self.color)]


@dataclass(frozen=True)
class VisibilityPatch(Patch):
    visible: Optional[bool] = None

    def _mapping(self, element):
        return [('visible', self.visible)]


FieldPatch = Union[TextPatch, GeometryPatch, StrokePatch, ShadowPatch, OverlayPatch, VisibilityPatch]
LayerPatch = Union[GeometryPatch, StrokePatch, ShadowPatch, OverlayPatch, FilterPatch,
                   ColorizePatch, VisibilityPatch]
