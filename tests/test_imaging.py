import numpy as np
import pytest
from PIL import Image

from badgeprint.imaging import (
    apply_filters, colorize_image, drop_shadow, multiply_tint, parse_color, recolor_pixels,
)


def _buffer(*pixels):
    return np.array([list(pixels)], dtype=np.uint8)


def test_parse_color_applies_opacity():
    assert parse_color('#ff0000') == (255, 0, 0, 255)
    assert parse_color('#ff0000', 50) == (255, 0, 0, 128)
    assert parse_color('#00ff00', 0)[3] == 0


def test_recolor_black_becomes_target_at_full_strength():
    buf = _buffer((0, 0, 0, 255))
    out = recolor_pixels(buf, (255, 255, 255))
    assert out is buf
    assert tuple(buf[0, 0]) == (255, 255, 255, 255)


def test_recolor_white_and_transparent_fade_out():
    buf = _buffer((255, 255, 255, 255), (0, 0, 0, 0))
    recolor_pixels(buf, (10, 20, 30))
    assert buf[0, 0, 3] == 0
    assert buf[0, 1, 3] == 0
    assert tuple(buf[0, 1, :3]) == (10, 20, 30)


def test_recolor_scales_with_luminance_and_alpha():
    buf = _buffer((128, 128, 128, 255), (0, 0, 0, 128))
    recolor_pixels(buf, (255, 0, 0))
    assert buf[0, 0, 3] == 127
    assert buf[0, 1, 3] == 128


def test_recolor_rejects_non_rgba_buffers():
    with pytest.raises(ValueError):
        recolor_pixels(np.zeros((2, 2, 3), dtype=np.uint8), (0, 0, 0))
    with pytest.raises(ValueError):
        recolor_pixels(np.zeros((2, 2, 4), dtype=np.float32), (0, 0, 0))


def test_colorize_image_keeps_ink_shape():
    img = Image.new('RGBA', (4, 1), (255, 255, 255, 255))
    img.putpixel((1, 0), (0, 0, 0, 255))
    out = colorize_image(img, '#0000ff')
    assert out.mode == 'RGBA' and out.size == (4, 1)
    assert out.getpixel((1, 0)) == (0, 0, 255, 255)
    assert out.getpixel((0, 0))[3] == 0


def test_apply_filters_identity_and_alpha():
    img = Image.new('RGBA', (2, 2), (100, 100, 100, 77))
    assert apply_filters(img, 100, 100) is img
    dark = apply_filters(img, 0, 100)
    assert dark.getpixel((0, 0)) == (0, 0, 0, 77)


def test_multiply_tint_keeps_alpha():
    img = Image.new('RGBA', (1, 1), (255, 255, 255, 90))
    assert multiply_tint(img, '#808080').getpixel((0, 0)) == (128, 128, 128, 90)


def test_drop_shadow_follows_mask():
    mask = Image.new('L', (5, 5), 0)
    mask.putpixel((2, 2), 255)
    shadow = drop_shadow(mask, 0, '#ff0000')
    assert shadow.getpixel((2, 2)) == (255, 0, 0, 255)
    assert shadow.getpixel((0, 0))[3] == 0
    blurred = drop_shadow(mask, 4, '#ff0000')
    assert blurred.getpixel((1, 2))[3] > 0
