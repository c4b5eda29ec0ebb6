import threading
import time

import pytest
from PIL import Image

from badgeprint.constants import CARD_HEIGHT, CARD_WIDTH
from badgeprint.elements import ColorizePatch, OverlayPatch, TextField, TextPatch
from badgeprint.exceptions import ImageLoadError
from badgeprint.model import EmployeeResource, Side, Template
from badgeprint.renderer import CardRenderer, layout_field, wrap_text


def _measure(text):
    return len(text) * 10.0


def _only_color(image):
    colors = image.getcolors(maxcolors=4)
    return colors[0][1] if colors and len(colors) == 1 else None


def _blank_template():
    """Default layout with every text field emptied."""
    t = Template.default()
    for side in (t.front, t.back):
        for f in side.fields:
            f.value = ''
    return t


# ─── wrap_text ──────────────────────────────────────────────────────────────────

def test_wrap_keeps_every_line_within_width():
    text = ' '.join(['abcd'] * 60)
    lines = wrap_text(text, _measure, 510)
    assert len(lines) > 1
    assert all(_measure(line) <= 510 for line in lines)
    assert ' '.join(lines) == text


def test_wrap_short_text_is_one_line():
    assert wrap_text('JUAN DELA CRUZ', _measure, 510) == ['JUAN DELA CRUZ']


def test_wrap_always_returns_a_line():
    assert wrap_text('', _measure, 510) == ['']
    assert wrap_text('   ', _measure, 510) == ['']


def test_wrap_puts_long_word_on_its_own_line():
    long_word = 'x' * 100
    assert wrap_text(f'short {long_word} tail', _measure, 510) == ['short', long_word, 'tail']


# ─── Rendering ──────────────────────────────────────────────────────────────────

def test_render_without_background_is_fallback_color(renderer):
    image = renderer.render(Side())
    assert image.size == (CARD_WIDTH, CARD_HEIGHT)
    assert image.mode == 'RGBA'
    assert _only_color(image) == (255, 255, 255, 255)


def test_unloadable_background_degrades_to_fallback(font_manager):
    r = CardRenderer(font_manager, fallback_color='#123456')
    image = r.render(Side(background='/definitely/missing.png'))
    assert _only_color(image) == (0x12, 0x34, 0x56, 255)


def test_background_covers_the_canvas(renderer, solid_uri):
    image = renderer.render(Side(background=solid_uri((255, 0, 0, 255), (30, 40))))
    assert _only_color(image) == (255, 0, 0, 255)


def test_front_photo_is_drawn_inside_its_box(renderer, solid_uri):
    t = _blank_template()
    employee = EmployeeResource('Ana Reyes', photo_ref=solid_uri((0, 0, 255, 255)))
    front, back = renderer.render_card(t, employee)

    x0, y0, x1, y1 = t.front.photo.get_bbox()
    assert front.getpixel(((x0 + x1) // 2, (y0 + y1) // 2)) == (0, 0, 255, 255)
    assert front.getpixel((5, 5)) == (255, 255, 255, 255)
    # The photo is a front-only layer
    assert _only_color(back) == (255, 255, 255, 255)


def test_back_never_draws_the_photo_even_when_visible(renderer, solid_uri):
    side = Side()
    side.photo.visible = True
    employee = EmployeeResource('Ana Reyes', photo_ref=solid_uri((0, 0, 255, 255)))
    assert _only_color(renderer.render(side, employee, 'back')) == (255, 255, 255, 255)


def test_photo_overlay_and_tint(renderer, solid_uri):
    t = _blank_template()
    t.update_layer('front', 'photo', OverlayPatch(color='#000000', opacity=100))
    employee = EmployeeResource('Ana Reyes', photo_ref=solid_uri((0, 0, 255, 255)))
    front = renderer.render(t.front, employee)
    x0, y0, x1, y1 = t.front.photo.get_bbox()
    assert front.getpixel(((x0 + x1) // 2, (y0 + y1) // 2)) == (0, 0, 0, 255)

    t = _blank_template()
    t.update_layer('front', 'photo', ColorizePatch(enabled=True, color='#808080'))
    front = renderer.render(t.front, employee)
    assert front.getpixel(((x0 + x1) // 2, (y0 + y1) // 2)) == (0, 0, 128, 255)


def test_colorized_signature_is_recolored(renderer, solid_uri):
    t = _blank_template()
    t.update_layer('front', 'sig', ColorizePatch(enabled=True, color='#ff0000'))
    employee = EmployeeResource('Ana Reyes', signature_ref=solid_uri((0, 0, 0, 255), (100, 32)))
    front = renderer.render(t.front, employee)

    x0, y0, x1, y1 = t.front.sig.get_bbox()
    assert front.getpixel(((x0 + x1) // 2, (y0 + y1) // 2)) == (255, 0, 0, 255)


def test_signature_renders_on_the_back(renderer, solid_uri):
    t = _blank_template()
    employee = EmployeeResource('Ana Reyes', signature_ref=solid_uri((0, 255, 0, 255), (100, 32)))
    back = renderer.render(t.back, employee, 'back')
    x0, y0, x1, y1 = t.back.sig.get_bbox()
    assert back.getpixel(((x0 + x1) // 2, (y0 + y1) // 2)) == (0, 255, 0, 255)


def test_text_fields_are_drawn(renderer):
    side = Side(fields=[TextField(field_id='name', value='HELLO', x=50, y=50, font_size=30,
                                  align='center', color='#000000')])
    image = renderer.render(side)
    assert _only_color(image) is None
    # Nothing outside the text band
    assert image.getpixel((5, 5)) == (255, 255, 255, 255)


def test_hidden_and_empty_fields_draw_nothing(renderer):
    side = Side(fields=[TextField(field_id='a', value='HIDDEN', visible=False),
                        TextField(field_id='b', value='')])
    assert _only_color(renderer.render(side)) == (255, 255, 255, 255)


def test_measure_field_grows_with_wrapping(renderer):
    field = TextField(field_id='a', value='WORD', font_size=20)
    w1, h1 = renderer.measure_field(field)
    TextPatch(value=' '.join(['WORD'] * 40)).apply(field)
    w2, h2 = renderer.measure_field(field)
    assert w1 > 0 and h1 > 0
    assert h2 > h1
    assert w2 <= CARD_WIDTH * 0.85


class _RecordingLoader:
    def __init__(self, images, delay=0.0):
        self.images = images
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def load(self, ref):
        with self._lock:
            self.calls.append(ref)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(self.delay)
            if ref not in self.images:
                raise ImageLoadError(ref, 'missing')
            return self.images[ref]
        finally:
            with self._lock:
                self.active -= 1


def test_fetches_run_concurrently_and_failures_are_isolated(font_manager):
    loader = _RecordingLoader({'bg': Image.new('RGBA', (4, 4), (255, 0, 0, 255)),
                               'photo': Image.new('RGBA', (4, 4), (0, 0, 255, 255))}, delay=0.2)
    r = CardRenderer(font_manager, loader)
    side = Template.default().front
    side.background = 'bg'
    resources = r.fetch_resources(side, EmployeeResource('A', photo_ref='photo', signature_ref='broken'))

    assert sorted(loader.calls) == ['bg', 'broken', 'photo']
    assert loader.max_active > 1
    assert resources['background'] is not None
    assert resources['photo'] is not None
    assert resources['sig'] is None


def test_renders_on_one_renderer_are_serialized(font_manager):
    loader = _RecordingLoader({'bg': Image.new('RGBA', (4, 4), (255, 0, 0, 255))}, delay=0.2)
    r = CardRenderer(font_manager, loader)
    results = []

    def worker():
        results.append(r.render(Side(background='bg')))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 2
    assert loader.max_active == 1


# ─── Real-font layout ───────────────────────────────────────────────────────────

def _fullname(font_size):
    return TextField(field_id='fullname', value='JESUS B. ILLUSTRISIMO', x=50, y=70,
                     font_size=font_size, align='center')


def test_fullname_fits_on_one_line_at_small_size(renderer):
    field = _fullname(11)
    lines = layout_field(field, renderer.font_for(field))
    assert [line for line, _, _, _ in lines] == ['JESUS B. ILLUSTRISIMO']
    line, left, _, width = lines[0]
    # Centered on the anchor
    assert left + width / 2 == pytest.approx(CARD_WIDTH / 2)


def test_fullname_wraps_once_wider_than_the_limit(renderer):
    field = _fullname(60)
    font = renderer.font_for(field)
    assert font.getlength(field.value) > CARD_WIDTH * 0.85

    lines = layout_field(field, font)
    assert len(lines) > 1
    _, height = renderer.measure_field(field)
    assert height == pytest.approx(len(lines) * 60 * 2 * 1.3)


def test_wrapping_keeps_every_word(renderer):
    field = _fullname(60)
    font = renderer.font_for(field)
    lines = [line for line, _, _, _ in layout_field(field, font)]

    assert ' '.join(lines).split() == ['JESUS', 'B.', 'ILLUSTRISIMO']
    # Too wide for the canvas on its own, but still laid out on its own line
    assert font.getlength('ILLUSTRISIMO') > CARD_WIDTH * 0.85
    assert 'ILLUSTRISIMO' in lines


def test_background_box_spans_the_measured_text(renderer):
    field = TextField(field_id='a', value='HELLO', x=50, y=40, font_size=20, align='center',
                      color='#ff0000', bg_color='#ff0000', bg_opacity=100)
    image = renderer.render(Side(fields=[field]))
    _, left, top, width = layout_field(field, renderer.font_for(field))[0]

    row = int(top) + 2
    assert image.getpixel((int(left) + 1, row)) == (255, 0, 0, 255)
    assert image.getpixel((int(left + width) - 2, row)) == (255, 0, 0, 255)
    assert image.getpixel((int(left) - 3, row)) == (255, 255, 255, 255)
    assert image.getpixel((int(left + width) + 3, row)) == (255, 255, 255, 255)


def test_bad_color_skips_only_that_element(renderer):
    broken = TextField(field_id='broken', value='BROKEN', x=50, y=20, font_size=20, align='center')
    broken.color = 'nope'
    good = TextField(field_id='good', value='GOOD', x=50, y=60, font_size=20, align='center',
                     color='#000000')
    image = renderer.render(Side(fields=[broken, good]))

    _, left, top, width = layout_field(good, renderer.font_for(good))[0]
    band = image.crop((int(left), int(top), int(left + width) + 1, int(top + 60 * 1.3)))
    assert band.getextrema()[0][0] < 128
