# utils/font_manager.py

import logging
import os
import platform
import re
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

from badgeprint.constants import DEFAULT_FONT_FAMILY

logger = logging.getLogger(__name__)

FontIndex = Dict[str, Dict[str, Dict[str, str]]]  # {family: {weight: {slant: filepath}}}


class FontManager:
    """
    Scans the system font directories and resolves (family, bold, italic)
    requests to PIL fonts.

    When no font file matches, Pillow's built-in scalable font is used so that
    rendering never fails for lack of fonts.
    """
    _STYLE_SUFFIXES = [
        re.compile(r'[\s_\-](?:bold|heavy|black)[\s_\-]?(?:italic|oblique)', re.IGNORECASE),
        re.compile(r'[\s_\-](?:italic|oblique)[\s_\-]?(?:bold|heavy|black)', re.IGNORECASE),
        re.compile(r'[\s_\-](?:bold|heavy|black)', re.IGNORECASE),
        re.compile(r'[\s_\-](?:italic|oblique)', re.IGNORECASE),
        re.compile(r'[\s_\-](?:regular|normal|roman|book)', re.IGNORECASE),
    ]
    _BOLD = re.compile(r'bold|heavy|black|semibold|extrabold', re.IGNORECASE)
    _ITALIC = re.compile(r'italic|oblique', re.IGNORECASE)

    def __init__(self, font_dirs: Optional[List[str]] = None, default_family: str = DEFAULT_FONT_FAMILY):
        self.default_family = default_family
        self._font_dirs = font_dirs if font_dirs is not None else self._common_font_dirs()
        self._fonts_by_family: FontIndex = self._index_fonts()
        self._cache: Dict[Tuple[str, int, bool, bool], ImageFont.ImageFont] = {}

        if not self._fonts_by_family:
            logger.warning("FontManager: No system fonts found, falling back to Pillow's default font.")

    @staticmethod
    def _common_font_dirs() -> List[str]:
        system = platform.system()
        if system == 'Windows':
            return [os.path.join(os.environ.get('WINDIR', 'C:\\Windows'), 'Fonts')]
        if system == 'Darwin':
            return [
                '/Library/Fonts',
                '/System/Library/Fonts',
                '/System/Library/Fonts/Supplemental',
                os.path.expanduser('~/Library/Fonts'),
            ]
        return [
            '/usr/share/fonts',
            '/usr/local/share/fonts',
            os.path.expanduser('~/.fonts'),
        ]

    def _scan_font_files(self) -> List[Tuple[str, str]]:
        found = []
        for d in self._font_dirs:
            if not os.path.isdir(d):
                continue
            for root, _, files in os.walk(d):
                for f in files:
                    if f.lower().endswith(('.ttf', '.otf')):
                        display_name = os.path.splitext(f)[0].replace('_', ' ')
                        found.append((display_name, os.path.join(root, f)))
        return sorted(found, key=lambda item: item[0].lower())

    def canonical_family(self, name: str) -> str:
        """Strips weight/slant suffixes: 'DejaVuSans-BoldOblique' -> 'Dejavusans'."""
        cleaned = name
        for pattern in self._STYLE_SUFFIXES:
            cleaned = pattern.sub('', cleaned).strip()
        # CamelCase file names ('DejaVuSans-Bold') carry the style without a separator
        cleaned = re.sub(r'(?:Bold|Italic|Oblique|Regular)+$', '', cleaned).strip(' -_')
        cleaned = re.sub(r'[\s\-_]+', ' ', cleaned).strip()
        return cleaned.lower().replace(' ', '') or name.lower()

    def _index_fonts(self) -> FontIndex:
        indexed: FontIndex = {}
        for display_name, filepath in self._scan_font_files():
            weight = 'bold' if self._BOLD.search(display_name) else 'normal'
            slant = 'italic' if self._ITALIC.search(display_name) else 'roman'
            family = self.canonical_family(display_name)
            # First hit wins; files are sorted so the choice is stable
            indexed.setdefault(family, {}).setdefault(weight, {}).setdefault(slant, filepath)
        return indexed

    def get_families(self) -> List[str]:
        return sorted(self._fonts_by_family.keys())

    def get_font_filepath(self, family: str, bold: bool = False, italic: bool = False) -> Optional[str]:
        """
        Best matching font file for the family. Falls back through the other
        styles of the family, then through the default family.
        """
        weight = 'bold' if bold else 'normal'
        slant = 'italic' if italic else 'roman'
        for fam in (family, self.default_family):
            variants = self._fonts_by_family.get(self.canonical_family(fam))
            if not variants:
                continue
            preferences = [
                (weight, slant),
                (weight, 'roman'),
                ('normal', slant),
                ('normal', 'roman'),
                ('bold', 'roman'),
                ('bold', 'italic'),
                ('normal', 'italic'),
            ]
            for w, s in preferences:
                path = variants.get(w, {}).get(s)
                if path:
                    return path
        # Any font at all beats the bitmap fallback
        for variants in self._fonts_by_family.values():
            path = variants.get('normal', {}).get('roman')
            if path:
                return path
        return None

    def get_pil_font(self, size: int, bold: bool = False, italic: bool = False,
                     family: Optional[str] = None) -> ImageFont.ImageFont:
        """Returns a PIL font of the given pixel size. Results are cached."""
        family = family or self.default_family
        size = max(1, int(round(size)))
        key = (family, size, bold, italic)
        font = self._cache.get(key)
        if font is not None:
            return font

        path = self.get_font_filepath(family, bold, italic)
        if path:
            try:
                font = ImageFont.truetype(path, size)
            except OSError as e:
                logger.warning(f"FontManager.get_pil_font: Error loading {path} (size {size}): {e}")
                font = None
        if font is None:
            font = ImageFont.load_default(size=size)
        self._cache[key] = font
        return font
