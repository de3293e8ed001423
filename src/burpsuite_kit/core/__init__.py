from .config import settings, get_settings, Settings
from .constants import *  # noqa: F401,F403

__all__ = [
    "settings",
    "get_settings",
    "Settings",
] + [name for name in globals().keys() if name.isupper()]
