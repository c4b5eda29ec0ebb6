# ─── Constants ──────────────────────────────────────────────────────────────────

# Final output resolution of one card side, in pixels
CARD_WIDTH = 600
CARD_HEIGHT = 960

# Size of the card on the editor canvas at zoom 1.0. Font sizes, stroke widths
# and shadow blur are expressed in these units.
EDITOR_WIDTH = 300
EDITOR_HEIGHT = 480
RENDER_SCALE = CARD_WIDTH / EDITOR_WIDTH

SIDES = ('front', 'back')
LAYER_KINDS = ('photo', 'sig')
ALIGNMENTS = ('left', 'center', 'right')

# ─── Ranges ─────────────────────────────────────────────────────────────────────
PERCENT_RANGE = (0.0, 100.0)
FONT_SIZE_RANGE = (6, 60)
OPACITY_RANGE = (0, 100)
FILTER_RANGE = (0, 200)   # brightness / contrast, 100 = unchanged

HISTORY_LIMIT = 40
SNAP_STEP = 5

# ─── Rendering ──────────────────────────────────────────────────────────────────
FALLBACK_BACKGROUND = '#ffffff'
WRAP_RATIO = 0.85
LINE_SPACING = 1.3
FETCH_WORKERS = 3
FETCH_TIMEOUT = 10.0

DEFAULT_FONT_FAMILY = 'DejaVu Sans'

# ─── Default field sets ─────────────────────────────────────────────────────────
# Field ids double as auto-fill tags.
DEFAULT_FRONT_FIELDS = [
    {'id': 'nickname', 'label': 'Nickname', 'value': 'JUAN', 'x': 50, 'y': 62,
     'font_size': 28, 'bold': True, 'align': 'center', 'color': '#1a1a1a'},
    {'id': 'fullname', 'label': 'Full Name', 'value': 'JUAN D. DELA CRUZ', 'x': 50, 'y': 72,
     'font_size': 12, 'bold': True, 'align': 'center', 'color': '#1a1a1a'},
    {'id': 'position', 'label': 'Position', 'value': 'POSITION', 'x': 50, 'y': 78,
     'font_size': 10, 'align': 'center', 'color': '#444444'},
]

DEFAULT_BACK_FIELDS = [
    {'id': 'company', 'label': 'Company', 'value': 'COMPANY NAME', 'x': 50, 'y': 8,
     'font_size': 14, 'bold': True, 'align': 'center', 'color': '#1a1a1a'},
    {'id': 'idnum', 'label': 'ID Number', 'value': '0000-0000', 'x': 50, 'y': 20,
     'font_size': 12, 'align': 'center', 'color': '#1a1a1a'},
    {'id': 'fullname', 'label': 'Full Name', 'value': 'JUAN D. DELA CRUZ', 'x': 50, 'y': 62,
     'font_size': 10, 'bold': True, 'align': 'center', 'color': '#1a1a1a'},
    {'id': 'notice', 'label': 'Notice', 'value': 'If found, please return to the HR office.',
     'x': 50, 'y': 85, 'font_size': 8, 'italic': True, 'align': 'center', 'color': '#444444'},
]

DEFAULT_FRONT_LAYERS = {
    'photo': {'x': 50, 'y': 35, 'w': 50, 'h': 31},
    'sig': {'x': 50, 'y': 86, 'w': 40, 'h': 8},
}

DEFAULT_BACK_LAYERS = {
    'photo': {'x': 50, 'y': 35, 'w': 50, 'h': 31, 'visible': False},
    'sig': {'x': 50, 'y': 55, 'w': 40, 'h': 8},
}

# Employee attribute -> field ids, per side
AUTOFILL_TAGS = {
    'front': ('fullname', 'nickname', 'position'),
    'back': ('fullname', 'idnum'),
}

# ─── Print sheet ────────────────────────────────────────────────────────────────
PRINT_CARD_SIZE_IN = (2.125, 3.4)
PRINT_GAP_IN = 0.25
