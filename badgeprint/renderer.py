# renderer.py

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from badgeprint.constants import (
    CARD_HEIGHT, CARD_WIDTH, FALLBACK_BACKGROUND, FETCH_WORKERS, LINE_SPACING,
    RENDER_SCALE, WRAP_RATIO,
)
from badgeprint.elements import ImageLayer, TextField
from badgeprint.exceptions import ImageLoadError
from badgeprint.imaging import apply_filters, colorize_image, drop_shadow, multiply_tint, parse_color
from badgeprint.model import EmployeeResource, Side, Template
from badgeprint.utils.font_manager import FontManager
from badgeprint.utils.image_loader import ImageLoader

logger = logging.getLogger(__name__)

Box = Tuple[int, int, int, int]


# ─── Text layout ────────────────────────────────────────────────────────────────

def wrap_text(text: str, measure: Callable[[str], float], max_width: float) -> List[str]:
    """
    Greedy word wrap. Words are packed onto a line while the measured line
    stays within max_width. Always returns at least one line, and a word
    wider than max_width gets a line of its own rather than being dropped.
    """
    words = text.split()
    if not words:
        return ['']

    lines = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if measure(candidate) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _line_left(anchor_x: float, line_width: float, align: str) -> float:
    if align == 'center':
        return anchor_x - line_width / 2
    if align == 'right':
        return anchor_x - line_width
    return anchor_x


# ─── Drawables ──────────────────────────────────────────────────────────────────
# Each draw_* function composites freshly built RGBA layers onto the canvas,
# so no fill/stroke/shadow state carries over between calls.

def draw_background(canvas: Image.Image, image: Optional[Image.Image],
                    fallback: str = FALLBACK_BACKGROUND):
    canvas.paste(parse_color(fallback), (0, 0, canvas.width, canvas.height))
    if image is None:
        return
    filled = ImageOps.fit(image.convert('RGBA'), canvas.size, Image.Resampling.LANCZOS)
    canvas.alpha_composite(filled)


def _stroke_box(canvas: Image.Image, box: Box, width: float, color: str):
    """Rectangle outline centered on the box edges, like a canvas strokeRect."""
    line = max(1, int(round(width)))
    half = line / 2.0
    layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    ImageDraw.Draw(layer).rectangle(
        [box[0] - half, box[1] - half, box[2] + half - 1, box[3] + half - 1],
        outline=parse_color(color), width=line)
    canvas.alpha_composite(layer)


def _clip_box(box: Box, size: Tuple[int, int]) -> Box:
    return max(0, box[0]), max(0, box[1]), min(size[0], box[2]), min(size[1], box[3])


def _place(canvas: Image.Image, image: Image.Image, box: Box) -> Image.Image:
    """A transparent canvas-sized layer with image centered inside box."""
    layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    x = box[0] + ((box[2] - box[0]) - image.width) // 2
    y = box[1] + ((box[3] - box[1]) - image.height) // 2
    layer.paste(image, (x, y), image)
    return layer


def prepare_layer_image(layer: ImageLayer, image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Fits a source image to the layer rectangle. Photos are cropped to fill,
    signatures are fitted inside without cropping; a colorized signature is
    recolored on a rectangle-sized buffer.
    """
    image = image.convert('RGBA')
    if not layer.is_signature:
        image = apply_filters(image, layer.brightness, layer.contrast)
        return ImageOps.fit(image, size, Image.Resampling.LANCZOS)

    if layer.recolors:
        buffer = Image.new('RGBA', size, (0, 0, 0, 0))
        fitted = ImageOps.contain(image, size, Image.Resampling.LANCZOS)
        buffer.paste(fitted, ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2), fitted)
        return colorize_image(buffer, layer.colorize_color)

    image = apply_filters(image, layer.brightness, layer.contrast)
    return ImageOps.contain(image, size, Image.Resampling.LANCZOS)


def draw_layer(canvas: Image.Image, layer: ImageLayer, image: Optional[Image.Image],
               scale: float = RENDER_SCALE):
    """
    Draws a photo or signature layer: shadow, stroke, image, then (photo only)
    the flat overlay and the multiply tint.
    """
    if image is None or not layer.visible:
        return
    box = layer.get_bbox(canvas.width, canvas.height)
    size = (box[2] - box[0], box[3] - box[1])
    if size[0] <= 0 or size[1] <= 0:
        return

    placed = _place(canvas, prepare_layer_image(layer, image, size), box)

    if layer.has_shadow:
        canvas.alpha_composite(drop_shadow(placed.getchannel('A'), layer.shadow_blur * scale, layer.shadow_color))
    if layer.has_stroke:
        _stroke_box(canvas, box, layer.stroke_width * scale, layer.stroke_color)
    canvas.alpha_composite(placed)

    if layer.is_signature:
        return

    clipped = _clip_box(box, canvas.size)
    if clipped[0] >= clipped[2] or clipped[1] >= clipped[3]:
        return
    if layer.overlay_opacity > 0:
        overlay = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle(
            [clipped[0], clipped[1], clipped[2] - 1, clipped[3] - 1],
            fill=parse_color(layer.overlay_color, layer.overlay_opacity))
        canvas.alpha_composite(overlay)
    if layer.colorize:
        canvas.paste(multiply_tint(canvas.crop(clipped), layer.colorize_color), clipped[:2])


def layout_field(field: TextField, font: ImageFont.FreeTypeFont, width: int = CARD_WIDTH,
                 height: int = CARD_HEIGHT, scale: float = RENDER_SCALE) -> List[Tuple[str, float, float, float]]:
    """(line, left, top, line width) for every wrapped line of a field, in canvas pixels."""
    anchor_x = field.anchor_x / 100.0 * width
    top = field.y / 100.0 * height
    line_height = field.font_size * scale * LINE_SPACING
    lines = wrap_text(field.value, font.getlength, width * WRAP_RATIO)
    laid_out = []
    for i, line in enumerate(lines):
        line_width = font.getlength(line)
        laid_out.append((line, _line_left(anchor_x, line_width, field.align), top + i * line_height, line_width))
    return laid_out


def draw_field(canvas: Image.Image, field: TextField, font: ImageFont.FreeTypeFont,
               scale: float = RENDER_SCALE):
    """Per line: background box, shadow, stroke, then the filled glyphs."""
    if not field.visible or not field.value.strip():
        return
    line_height = field.font_size * scale * LINE_SPACING
    stroke = max(1, int(round(field.stroke_width * scale / 2))) if field.has_stroke else 0

    for line, left, top, line_width in layout_field(field, font, canvas.width, canvas.height, scale):
        if field.bg_opacity > 0:
            box_layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
            ImageDraw.Draw(box_layer).rectangle(
                [left, top, left + line_width, top + line_height],
                fill=parse_color(field.bg_color, field.bg_opacity))
            canvas.alpha_composite(box_layer)

        if field.has_shadow:
            mask = Image.new('L', canvas.size, 0)
            ImageDraw.Draw(mask).text((left, top), line, font=font, fill=255, anchor='la',
                                      stroke_width=stroke, stroke_fill=255)
            canvas.alpha_composite(drop_shadow(mask, field.shadow_blur * scale, field.shadow_color))

        text_layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(text_layer)
        if stroke:
            draw.text((left, top), line, font=font, fill=parse_color(field.color), anchor='la',
                      stroke_width=stroke, stroke_fill=parse_color(field.stroke_color))
        else:
            draw.text((left, top), line, font=font, fill=parse_color(field.color), anchor='la')
        canvas.alpha_composite(text_layer)


# ─── Pipeline ───────────────────────────────────────────────────────────────────

class CardRenderer:
    """
    Rasterizes one card side at a fixed 600x960 resolution, independent of
    the editor zoom.

    Background, photo and signature are fetched concurrently; drawing starts
    only after every fetch has settled. Renders on the same instance are
    serialized, so a second call waits for the one in flight.
    """

    def __init__(self, font_manager: Optional[FontManager] = None, loader: Optional[ImageLoader] = None,
                 fallback_color: str = FALLBACK_BACKGROUND):
        self.font_manager = font_manager or FontManager()
        self.loader = loader or ImageLoader()
        self.fallback_color = fallback_color
        self.width = CARD_WIDTH
        self.height = CARD_HEIGHT
        self.scale = RENDER_SCALE
        self._render_lock = threading.Lock()

    def font_for(self, field: TextField) -> ImageFont.FreeTypeFont:
        return self.font_manager.get_pil_font(field.font_size * self.scale, field.bold, field.italic)

    def measure_field(self, field: TextField) -> Tuple[float, float]:
        """Size of a field's wrapped text block in canvas pixels."""
        lines = layout_field(field, self.font_for(field), self.width, self.height, self.scale)
        width = max(line_width for _, _, _, line_width in lines)
        return width, len(lines) * field.font_size * self.scale * LINE_SPACING

    def _load(self, key: str, ref: Optional[str]) -> Optional[Image.Image]:
        if not ref:
            return None
        try:
            return self.loader.load(ref)
        except ImageLoadError as e:
            logger.warning(f"CardRenderer._load: {key} skipped: {e}")
            return None

    def fetch_resources(self, side: Side, employee: Optional[EmployeeResource],
                        side_name: str = 'front') -> Dict[str, Optional[Image.Image]]:
        refs = {'background': side.background, 'photo': None, 'sig': None}
        if employee is not None:
            # Only the front consumes the employee photo
            if side_name == 'front' and side.photo.visible:
                refs['photo'] = employee.photo_ref
            if side.sig.visible:
                refs['sig'] = employee.signature_ref

        wanted = {key: ref for key, ref in refs.items() if ref}
        resources: Dict[str, Optional[Image.Image]] = {key: None for key in refs}
        if not wanted:
            return resources
        with ThreadPoolExecutor(max_workers=min(FETCH_WORKERS, len(wanted))) as pool:
            futures = {key: pool.submit(self._load, key, ref) for key, ref in wanted.items()}
            for key, future in futures.items():
                resources[key] = future.result()
        return resources

    @staticmethod
    def _draw(name: str, draw_fn, *args):
        """Runs one drawable; a malformed element (bad color) is skipped, not fatal."""
        try:
            draw_fn(*args)
        except ValueError as e:
            logger.warning(f"CardRenderer._draw: Skipped '{name}': {e}")

    def render(self, side: Side, employee: Optional[EmployeeResource] = None,
               side_name: str = 'front') -> Image.Image:
        with self._render_lock:
            resources = self.fetch_resources(side, employee, side_name)

            canvas = Image.new('RGBA', (self.width, self.height), parse_color(self.fallback_color))
            draw_background(canvas, resources['background'], self.fallback_color)
            if side_name == 'front':
                self._draw('photo', draw_layer, canvas, side.photo, resources['photo'], self.scale)
            self._draw('sig', draw_layer, canvas, side.sig, resources['sig'], self.scale)
            for field in side.fields:
                if field.visible:
                    self._draw(field.field_id, draw_field, canvas, field, self.font_for(field), self.scale)

            logger.debug(f"CardRenderer.render: Rendered {side_name} side "
                         f"({sum(r is not None for r in resources.values())} images).")
            return canvas

    def render_card(self, template: Template,
                    employee: Optional[EmployeeResource] = None) -> Tuple[Image.Image, Image.Image]:
        return (self.render(template.front, employee, 'front'),
                self.render(template.back, employee, 'back'))
