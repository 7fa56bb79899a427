from .constants import VERSION
from .model import Entry, build_entries
from .picker import Mode, Selector, select, select_many

__version__ = VERSION

__all__ = [
    "Entry",
    "Mode",
    "Selector",
    "build_entries",
    "select",
    "select_many",
]
