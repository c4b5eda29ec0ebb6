# imaging.py
#
# Pixel-level helpers for the compositing pipeline.

from typing import Tuple

import numpy as np
from PIL import Image, ImageChops, ImageColor, ImageEnhance, ImageFilter

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


def parse_color(color: str, opacity: float = 100) -> RGBA:
    """'#rrggbb' (or any PIL color name) plus an opacity in percent -> RGBA tuple."""
    rgb = ImageColor.getrgb(color)[:3]
    alpha = int(round(max(0.0, min(100.0, opacity)) / 100.0 * 255))
    return rgb[0], rgb[1], rgb[2], alpha


def recolor_pixels(buffer: np.ndarray, rgb: RGB) -> np.ndarray:
    """
    Recolors an H x W x 4 uint8 RGBA buffer in place.

    Every pixel becomes the target color with alpha
    round(255 * (1 - mean(R, G, B) / 255) * (A / 255)): dark opaque ink turns
    into solid target color, light or transparent pixels fade out, so
    anti-aliased edges keep their coverage without a halo.
    """
    if buffer.ndim != 3 or buffer.shape[2] != 4 or buffer.dtype != np.uint8:
        raise ValueError(f"Expected an HxWx4 uint8 buffer, got shape {buffer.shape} dtype {buffer.dtype}")

    pixels = buffer.astype(np.float64)
    luminance = pixels[:, :, :3].mean(axis=2) / 255.0
    strength = (1.0 - luminance) * (pixels[:, :, 3] / 255.0)
    # Half-up rounding
    alpha = np.floor(strength * 255.0 + 0.5)

    buffer[:, :, 0] = rgb[0]
    buffer[:, :, 1] = rgb[1]
    buffer[:, :, 2] = rgb[2]
    buffer[:, :, 3] = np.clip(alpha, 0, 255).astype(np.uint8)
    return buffer


def colorize_image(image: Image.Image, color: str) -> Image.Image:
    buffer = np.array(image.convert('RGBA'), dtype=np.uint8)
    recolor_pixels(buffer, parse_color(color)[:3])
    return Image.fromarray(buffer, 'RGBA')


def apply_filters(image: Image.Image, brightness: float, contrast: float) -> Image.Image:
    """Brightness/contrast in percent, 100 leaves the image unchanged. Alpha is kept."""
    if brightness == 100 and contrast == 100:
        return image
    alpha = image.getchannel('A')
    rgb = image.convert('RGB')
    if brightness != 100:
        rgb = ImageEnhance.Brightness(rgb).enhance(brightness / 100.0)
    if contrast != 100:
        rgb = ImageEnhance.Contrast(rgb).enhance(contrast / 100.0)
    out = rgb.convert('RGBA')
    out.putalpha(alpha)
    return out


def multiply_tint(image: Image.Image, color: str) -> Image.Image:
    """Multiply-blends a flat color over the image, keeping its alpha."""
    alpha = image.getchannel('A')
    tint = Image.new('RGB', image.size, parse_color(color)[:3])
    out = ImageChops.multiply(image.convert('RGB'), tint).convert('RGBA')
    out.putalpha(alpha)
    return out


def drop_shadow(mask: Image.Image, blur: float, color: str) -> Image.Image:
    """
    A shadow layer the size of mask: the shadow color wherever mask is set,
    gaussian-blurred by blur / 2 (canvas-style shadowBlur).
    """
    rgba = parse_color(color)
    shadow = Image.new('RGBA', mask.size, rgba[:3] + (0,))
    alpha = mask.point(lambda v: v * rgba[3] // 255)
    shadow.putalpha(alpha)
    if blur > 0:
        shadow = shadow.filter(ImageFilter.GaussianBlur(blur / 2.0))
    return shadow
