# utils/__init__.py

from .font_manager import FontManager
from .image_loader import ImageLoader
from .geometry import calculate_snap, clamp, clamp_percent
