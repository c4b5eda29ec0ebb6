# app_service.py

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from PIL import Image

from badgeprint.controller import EditorSession
from badgeprint.exceptions import PersistenceError
from badgeprint.model import EmployeeResource, Template
from badgeprint.persistence import CardStore, TemplateStore, export_sheet_pdf
from badgeprint.renderer import CardRenderer
from badgeprint.utils.font_manager import FontManager
from badgeprint.utils.image_loader import ImageLoader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A non-fatal message for the user. The in-memory state stays as it is."""
    level: str
    message: str


class AppService:
    """
    Wires stores, loader, fonts and renderer together for one caller.
    Each instance is independent; create as many as needed.
    """

    def __init__(self, template_path: str, card_path: Optional[str] = None,
                 image_root: Optional[str] = None, font_manager: Optional[FontManager] = None,
                 loader: Optional[ImageLoader] = None):
        self.font_manager = font_manager or FontManager()
        self.loader = loader or ImageLoader(image_root)
        self.renderer = CardRenderer(self.font_manager, self.loader)
        self.templates = TemplateStore(template_path)
        self.cards = CardStore(card_path) if card_path else None
        self.notices: List[Notice] = []

    def _notify(self, level: str, message: str) -> Notice:
        notice = Notice(level, message)
        self.notices.append(notice)
        getattr(logger, level)(f"AppService: {message}")
        return notice

    def open_session(self, template_name: Optional[str] = None, company: str = '') -> EditorSession:
        """Session on the named stored template, or on a fresh default one."""
        template = None
        if template_name:
            try:
                template = self.templates.find(template_name)
            except PersistenceError as e:
                self._notify('warning', f"Could not read templates: {e}")
            if template is None:
                self._notify('warning', f"Template '{template_name}' not found, starting from the default.")
        return EditorSession(template or Template.default(template_name or 'Default', company))

    def save_template(self, session: EditorSession) -> Optional[Notice]:
        try:
            self.templates.save_template(session.template)
        except PersistenceError as e:
            return self._notify('error', f"Template not saved: {e}")
        return None

    def render(self, template: Template,
               employee: Optional[EmployeeResource] = None) -> Tuple[Image.Image, Image.Image]:
        return self.renderer.render_card(template, employee)

    @staticmethod
    def merge(template: Template, employee: EmployeeResource) -> Template:
        """A copy of template auto-filled for employee; the original is untouched."""
        merged = Template.from_dict(template.to_dict())
        merged.autofill(employee)
        return merged

    def save_card(self, template: Template, employee: Optional[EmployeeResource]) -> Optional[Notice]:
        """Renders and stores a card. A missing employee raises ValidationError."""
        if self.cards is None:
            return self._notify('warning', "No card store configured, card not saved.")
        front, back = self.render(template, employee)
        try:
            self.cards.save_card(employee, front, back)
        except PersistenceError as e:
            return self._notify('error', f"Card not saved: {e}")
        return None

    def export_pdf(self, export_path: str, template: Template,
                   employees: Sequence[Optional[EmployeeResource]], page: str = 'letter') -> Optional[Notice]:
        cards = [self.render(self.merge(template, e) if e else template, e) for e in employees]
        try:
            export_sheet_pdf(export_path, cards, page)
        except PersistenceError as e:
            return self._notify('error', f"PDF not exported: {e}")
        return None
