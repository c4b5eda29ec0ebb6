# persistence.py
#
# JSON-file stores for templates and saved cards, and the printable PDF sheet.

import base64
import io
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas as pdf_canvas

from badgeprint.constants import PRINT_CARD_SIZE_IN, PRINT_GAP_IN
from badgeprint.exceptions import PersistenceError, ValidationError
from badgeprint.model import EmployeeResource, Template

logger = logging.getLogger(__name__)

PAGE_SIZES = {'letter': LETTER, 'a4': A4}


def encode_png_data_uri(image: Image.Image) -> str:
    buf = io.BytesIO()
    image.save(buf, 'PNG')
    return 'data:image/png;base64,' + base64.b64encode(buf.getvalue()).decode('ascii')


def _flatten(image: Image.Image) -> Image.Image:
    """RGBA onto white, for consumers that have no alpha channel."""
    if image.mode != 'RGBA':
        return image.convert('RGB')
    background = Image.new('RGB', image.size, (255, 255, 255))
    background.paste(image, mask=image.getchannel('A'))
    return background


class JsonListStore:
    """A JSON file holding a list of records. A missing file reads as empty."""

    def __init__(self, path: str):
        self.path = path

    def load_all(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, list):
            raise PersistenceError(f"{self.path} does not contain a list of records")
        return [r for r in data if isinstance(r, dict)]

    def save_all(self, records: List[Dict[str, Any]]):
        tmp_path = self.path + '.tmp'
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(records, f, indent=4)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e
        logger.debug(f"{type(self).__name__}.save_all: Wrote {len(records)} records to {self.path}.")


class TemplateStore(JsonListStore):
    """Templates keyed by id. Records hold only the design, never editor state."""

    def templates(self) -> List[Template]:
        return [Template.from_dict(r) for r in self.load_all()]

    def find(self, name: str) -> Optional[Template]:
        for record in self.load_all():
            if record.get('name') == name:
                return Template.from_dict(record)
        return None

    def save_template(self, template: Template) -> Template:
        if not template.name.strip():
            raise ValidationError("Template name must not be empty")
        records = self.load_all()
        record = template.to_dict()
        for i, existing in enumerate(records):
            if existing.get('id') == template.template_id:
                records[i] = record
                break
        else:
            records.append(record)
        self.save_all(records)
        logger.info(f"TemplateStore.save_template: Saved '{template.name}' ({template.template_id}).")
        return template

    def delete_template(self, template_id: str) -> bool:
        records = self.load_all()
        kept = [r for r in records if r.get('id') != template_id]
        if len(kept) == len(records):
            return False
        self.save_all(kept)
        return True


class CardStore(JsonListStore):
    """Rendered cards as PNG data URIs, one record per employee name."""

    def save_card(self, employee: Optional[EmployeeResource], front: Image.Image,
                  back: Image.Image) -> Dict[str, Any]:
        if employee is None or not employee.name.strip():
            raise ValidationError("Select an employee before saving a card")
        record = {
            'employee_name': employee.name,
            'position': employee.position,
            'front': encode_png_data_uri(front),
            'back': encode_png_data_uri(back),
            'saved_at': datetime.now().isoformat(timespec='seconds'),
        }
        records = [r for r in self.load_all() if r.get('employee_name') != employee.name]
        records.append(record)
        self.save_all(records)
        logger.info(f"CardStore.save_card: Saved card for '{employee.name}'.")
        return record


def export_sheet_pdf(export_path: str, cards: Sequence[Tuple[Image.Image, Image.Image]],
                     page: str = 'letter') -> str:
    """
    Writes one page per card with the front and back side by side at
    print size, centered on the page.
    """
    if not cards:
        raise ValidationError("Nothing to export")
    pagesize = PAGE_SIZES.get(page.lower())
    if pagesize is None:
        raise ValidationError(f"Unknown page size '{page}', expected one of {sorted(PAGE_SIZES)}")

    pw, ph = pagesize
    cw, ch = PRINT_CARD_SIZE_IN[0] * inch, PRINT_CARD_SIZE_IN[1] * inch
    gap = PRINT_GAP_IN * inch
    x0 = (pw - (2 * cw + gap)) / 2
    y0 = (ph - ch) / 2

    try:
        pdf = pdf_canvas.Canvas(export_path, pagesize=pagesize)
        for front, back in cards:
            pdf.drawInlineImage(_flatten(front), x0, y0, width=cw, height=ch)
            pdf.drawInlineImage(_flatten(back), x0 + cw + gap, y0, width=cw, height=ch)
            pdf.showPage()
        pdf.save()
    except OSError as e:
        raise PersistenceError(f"Cannot write {export_path}: {e}") from e
    logger.info(f"persistence.export_sheet_pdf: Exported {len(cards)} cards to {export_path}.")
    return export_path
