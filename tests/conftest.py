import io

import pytest
from PIL import Image

from badgeprint.persistence import encode_png_data_uri
from badgeprint.renderer import CardRenderer
from badgeprint.utils.font_manager import FontManager
from badgeprint.utils.image_loader import ImageLoader


@pytest.fixture
def font_manager():
    # No font directories: Pillow's built-in font only, fast and deterministic
    return FontManager(font_dirs=[])


@pytest.fixture
def renderer(font_manager):
    return CardRenderer(font_manager, ImageLoader())


@pytest.fixture
def solid_uri():
    def make(color, size=(20, 20)):
        return encode_png_data_uri(Image.new('RGBA', size, color))
    return make


@pytest.fixture
def png_bytes():
    def make(color, size=(8, 8)):
        buf = io.BytesIO()
        Image.new('RGBA', size, color).save(buf, 'PNG')
        return buf.getvalue()
    return make
