# badgeprint/__init__.py

from .exceptions import BadgeError, ImageLoadError, PersistenceError, UnknownElementError, ValidationError
from .model import EmployeeResource, Side, Template
from .history import History
from .controller import EditorSession
from .renderer import CardRenderer

__version__ = '0.1.0'
