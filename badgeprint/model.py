# model.py

import copy
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from badgeprint.constants import (
    AUTOFILL_TAGS, DEFAULT_BACK_FIELDS, DEFAULT_BACK_LAYERS, DEFAULT_FRONT_FIELDS,
    DEFAULT_FRONT_LAYERS, LAYER_KINDS, SIDES,
)
from badgeprint.elements import ImageLayer, TextField, TextPatch
from badgeprint.elements.patches import FieldPatch, LayerPatch
from badgeprint.exceptions import UnknownElementError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeResource:
    """Read-only view of an employee record used for auto-fill and image sourcing."""
    name: str
    position: str = ''
    employee_code: str = ''
    photo_ref: Optional[str] = None
    signature_ref: Optional[str] = None

    @property
    def first_name(self) -> str:
        parts = self.name.split()
        return parts[0] if parts else ''


@dataclass
class Side:
    """One face of the card. Fields render in list order, later entries on top."""
    fields: List[TextField] = field(default_factory=list)
    photo: ImageLayer = field(default_factory=lambda: ImageLayer(kind='photo'))
    sig: ImageLayer = field(default_factory=lambda: ImageLayer(kind='sig'))
    background: Optional[str] = None

    def get_field(self, field_id: str) -> TextField:
        for f in self.fields:
            if f.field_id == field_id:
                return f
        raise UnknownElementError(f"No field '{field_id}' on this side")

    def has_field(self, field_id: str) -> bool:
        return any(f.field_id == field_id for f in self.fields)

    def get_layer(self, kind: str) -> ImageLayer:
        if kind == 'photo':
            return self.photo
        if kind == 'sig':
            return self.sig
        raise UnknownElementError(f"Unknown layer '{kind}', expected one of {LAYER_KINDS}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'background': self.background,
            'fields': [f.to_dict() for f in self.fields],
            'photo': self.photo.to_dict(),
            'sig': self.sig.to_dict(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Side':
        fields_data = data.get('fields', [])
        if not isinstance(fields_data, list):
            logger.warning("Side.from_dict: 'fields' is not a list. Loading side without fields.")
            fields_data = []
        photo = dict(data.get('photo') or {}, kind='photo')
        sig = dict(data.get('sig') or {}, kind='sig')
        return Side(
            fields=[TextField.from_dict(f) for f in fields_data if isinstance(f, dict)],
            photo=ImageLayer.from_dict(photo),
            sig=ImageLayer.from_dict(sig),
            background=data.get('background') or None,
        )


class Template:
    """
    The whole two-sided card design plus its editing contract.

    The field set of each side is fixed when the template is built; the
    mutators below only change attributes, with numeric input clamped.
    """

    def __init__(self, name: str, front: Side, back: Side, company: str = '',
                 template_id: Optional[str] = None, created_at: Optional[str] = None):
        self.template_id = template_id or uuid.uuid4().hex
        self.name = name
        self.company = company
        self.created_at = created_at or datetime.now().isoformat(timespec='seconds')
        self.front = front
        self.back = back

    @classmethod
    def default(cls, name: str = 'Default', company: str = '') -> 'Template':
        def build(field_specs, layer_specs):
            fields_ = [TextField.from_dict(spec) for spec in field_specs]
            return Side(
                fields=fields_,
                photo=ImageLayer.from_dict(dict(layer_specs['photo'], kind='photo')),
                sig=ImageLayer.from_dict(dict(layer_specs['sig'], kind='sig')),
            )

        return cls(name, build(DEFAULT_FRONT_FIELDS, DEFAULT_FRONT_LAYERS),
                   build(DEFAULT_BACK_FIELDS, DEFAULT_BACK_LAYERS), company=company)

    # ── Editing contract ─────────────────────────────────────────────────────

    def get(self, side: str) -> Side:
        if side == 'front':
            return self.front
        if side == 'back':
            return self.back
        raise UnknownElementError(f"Unknown side '{side}', expected one of {SIDES}")

    def update_field(self, side: str, field_id: str, patch: FieldPatch) -> TextField:
        return patch.apply(self.get(side).get_field(field_id))

    def update_layer(self, side: str, kind: str, patch: LayerPatch) -> ImageLayer:
        return patch.apply(self.get(side).get_layer(kind))

    def set_background(self, side: str, ref: Optional[str]) -> Side:
        s = self.get(side)
        s.background = ref or None
        return s

    def autofill(self, employee: EmployeeResource) -> List[str]:
        """
        Copies employee attributes into the tagged fields of both sides.
        Returns the '<side>.<field>' ids that were written.
        """
        values = {
            'fullname': employee.name,
            'nickname': employee.first_name,
            'position': employee.position,
        }
        # An empty employee code leaves the id number untouched
        if employee.employee_code:
            values['idnum'] = employee.employee_code

        written = []
        for side in SIDES:
            s = self.get(side)
            for tag in AUTOFILL_TAGS[side]:
                if tag in values and s.has_field(tag):
                    self.update_field(side, tag, TextPatch(value=values[tag]))
                    written.append(f"{side}.{tag}")
        return written

    # ── Snapshots ────────────────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Side]:
        return {'front': copy.deepcopy(self.front), 'back': copy.deepcopy(self.back)}

    def restore(self, front: Side, back: Side):
        self.front = copy.deepcopy(front)
        self.back = copy.deepcopy(back)

    # ── Serialization ────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.template_id,
            'name': self.name,
            'company': self.company,
            'created_at': self.created_at,
            'front': self.front.to_dict(),
            'back': self.back.to_dict(),
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Template':
        return Template(
            name=data.get('name', ''),
            company=data.get('company', ''),
            template_id=data.get('id'),
            created_at=data.get('created_at'),
            front=Side.from_dict(data.get('front') or {}),
            back=Side.from_dict(data.get('back') or {}),
        )

    def __repr__(self):
        return f"Template(id={self.template_id!r}, name={self.name!r})"
