# controller.py
#
# Pointer-driven editing of a card template. All state lives on the
# EditorSession the caller owns; every operation takes it explicitly.

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from badgeprint.constants import EDITOR_HEIGHT, EDITOR_WIDTH, RENDER_SCALE, SIDES
from badgeprint.elements import GeometryPatch, ImageLayer, TextField
from badgeprint.elements.patches import FieldPatch, LayerPatch
from badgeprint.exceptions import UnknownElementError
from badgeprint.history import History
from badgeprint.model import EmployeeResource, Side, Template
from badgeprint.utils.geometry import (
    box_contains, calculate_snap, clamp_percent, percent_to_screen, pointer_to_percent,
)

logger = logging.getLogger(__name__)

# ('field', field_id) or ('layer', 'photo' | 'sig')
Target = Tuple[str, str]
# Returns the (width, height) of a field's text block in card pixels
MeasureFn = Callable[[TextField], Tuple[float, float]]


@dataclass
class Selection:
    """At most one of a field or a layer is selected."""
    field_id: Optional[str] = None
    layer: Optional[str] = None

    @property
    def target(self) -> Optional[Target]:
        if self.field_id is not None:
            return ('field', self.field_id)
        if self.layer is not None:
            return ('layer', self.layer)
        return None

    def clear(self):
        self.field_id = None
        self.layer = None


@dataclass
class DragState:
    target: Target
    offset_x: float
    offset_y: float
    moves: int = 0


class EditorSession:
    """
    Everything one editing session owns: the template, its history, the
    active side, selection, zoom and snap flags, and the drag in progress.
    """

    def __init__(self, template: Template, zoom: float = 1.0, snap: bool = False,
                 history: Optional[History] = None):
        if zoom <= 0:
            raise ValueError(f"Zoom must be positive, got {zoom}")
        self.template = template
        self.history = history if history is not None else History()
        self.active_side = 'front'
        self.selection = Selection()
        self.zoom = zoom
        self.snap = snap
        self.drag: Optional[DragState] = None
        # Baseline snapshot so the first edit can be undone
        self.history.push(template.front, template.back)

    @property
    def side(self) -> Side:
        return self.template.get(self.active_side)

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None

    @property
    def screen_size(self) -> Tuple[float, float]:
        return EDITOR_WIDTH * self.zoom, EDITOR_HEIGHT * self.zoom

    def commit(self):
        """Snapshots the current template into history."""
        self.history.push(self.template.front, self.template.back)


# ─── Selection ──────────────────────────────────────────────────────────────────

def switch_side(session: EditorSession, side: str):
    if side not in SIDES:
        raise UnknownElementError(f"Unknown side '{side}', expected one of {SIDES}")
    if side != session.active_side:
        session.active_side = side
        session.selection.clear()
        session.drag = None


def select_field(session: EditorSession, field_id: str):
    session.side.get_field(field_id)
    session.selection.clear()
    session.selection.field_id = field_id


def select_layer(session: EditorSession, kind: str):
    session.side.get_layer(kind)
    session.selection.clear()
    session.selection.layer = kind


def clear_selection(session: EditorSession):
    session.selection.clear()


def set_zoom(session: EditorSession, zoom: float):
    if zoom <= 0:
        raise ValueError(f"Zoom must be positive, got {zoom}")
    session.zoom = zoom


def toggle_snap(session: EditorSession) -> bool:
    session.snap = not session.snap
    return session.snap


# ─── Hit testing ────────────────────────────────────────────────────────────────

def _approximate_measure(field: TextField) -> Tuple[float, float]:
    size = field.font_size * RENDER_SCALE
    return max(1, len(field.value)) * size * 0.6, size * 1.3


def _resolve(session: EditorSession, target: Target):
    kind, key = target
    if kind == 'field':
        return session.side.get_field(key)
    if kind == 'layer':
        return session.side.get_layer(key)
    raise UnknownElementError(f"Unknown target kind '{kind}'")


def _anchor_on_screen(session: EditorSession, element) -> Tuple[float, float]:
    x = element.anchor_x if isinstance(element, TextField) else element.x
    return percent_to_screen(x, session.zoom, EDITOR_WIDTH), percent_to_screen(element.y, session.zoom, EDITOR_HEIGHT)


def field_screen_box(session: EditorSession, field: TextField,
                     measure: Optional[MeasureFn] = None) -> Tuple[float, float, float, float]:
    """Bounding box of a field's text on screen, derived from its card-pixel size."""
    w_px, h_px = (measure or _approximate_measure)(field)
    scale = session.zoom / RENDER_SCALE
    w, h = w_px * scale, h_px * scale
    ax, ay = _anchor_on_screen(session, field)
    if field.align == 'center':
        x0 = ax - w / 2
    elif field.align == 'right':
        x0 = ax - w
    else:
        x0 = ax
    return x0, ay, x0 + w, ay + h


def hit_test(session: EditorSession, x: float, y: float,
             measure: Optional[MeasureFn] = None) -> Optional[Target]:
    """Topmost visible element of the active side under a screen point."""
    side = session.side
    for field in reversed(side.fields):
        if field.visible and box_contains(field_screen_box(session, field, measure), x, y):
            return ('field', field.field_id)
    sw, sh = session.screen_size
    for layer in (side.sig, side.photo):
        if layer.visible and layer.contains_point(x, y, sw, sh):
            return ('layer', layer.kind)
    return None


# ─── Pointer gestures ───────────────────────────────────────────────────────────

def pointer_down(session: EditorSession, target: Optional[Target], x: float, y: float) -> bool:
    """
    Starts a drag on target. A None target (empty canvas) clears the
    selection. Returns True if a drag started.
    """
    session.drag = None
    if target is None:
        session.selection.clear()
        return False

    element = _resolve(session, target)
    if not element.visible:
        logger.debug(f"controller.pointer_down: Ignoring hidden element {target}.")
        return False

    if target[0] == 'field':
        select_field(session, target[1])
    else:
        select_layer(session, target[1])

    ax, ay = _anchor_on_screen(session, element)
    session.drag = DragState(target=target, offset_x=x - ax, offset_y=y - ay)
    return True


def pointer_move(session: EditorSession, x: float, y: float) -> bool:
    """
    Moves the dragged element under the pointer. Writes straight into the
    model and never touches history. Returns False when no drag is active.
    """
    drag = session.drag
    if drag is None:
        return False

    new_x = pointer_to_percent(x, drag.offset_x, session.zoom, EDITOR_WIDTH)
    new_y = pointer_to_percent(y, drag.offset_y, session.zoom, EDITOR_HEIGHT)
    if session.snap:
        new_x, new_y = calculate_snap(new_x), calculate_snap(new_y)
    new_x, new_y = clamp_percent(new_x), clamp_percent(new_y)

    element = _resolve(session, drag.target)
    if isinstance(element, TextField) and element.align == 'right':
        new_x = 100.0 - new_x
    GeometryPatch(x=new_x, y=new_y).apply(element)
    drag.moves += 1
    return True


def pointer_up(session: EditorSession) -> bool:
    """Ends the gesture. One completed gesture pushes exactly one snapshot."""
    drag = session.drag
    if drag is None:
        return False
    session.drag = None
    session.commit()
    logger.debug(f"controller.pointer_up: Drag of {drag.target} finished after {drag.moves} moves.")
    return True


# ─── Direct edits ───────────────────────────────────────────────────────────────

def edit_field(session: EditorSession, field_id: str, patch: FieldPatch,
               side: Optional[str] = None) -> TextField:
    field = session.template.update_field(side or session.active_side, field_id, patch)
    session.commit()
    return field


def edit_layer(session: EditorSession, kind: str, patch: LayerPatch,
               side: Optional[str] = None) -> ImageLayer:
    layer = session.template.update_layer(side or session.active_side, kind, patch)
    session.commit()
    return layer


def set_background(session: EditorSession, ref: Optional[str], side: Optional[str] = None) -> Side:
    s = session.template.set_background(side or session.active_side, ref)
    session.commit()
    return s


def apply_employee(session: EditorSession, employee: EmployeeResource):
    written = session.template.autofill(employee)
    session.commit()
    return written


# ─── Undo / redo ────────────────────────────────────────────────────────────────

def undo(session: EditorSession) -> bool:
    entry = session.history.undo()
    if entry is None:
        return False
    session.drag = None
    session.template.restore(entry.front, entry.back)
    return True


def redo(session: EditorSession) -> bool:
    entry = session.history.redo()
    if entry is None:
        return False
    session.drag = None
    session.template.restore(entry.front, entry.back)
    return True
