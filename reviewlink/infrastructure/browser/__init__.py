from .clipboard import (
    DEFAULT_STRATEGIES,
    ClipboardAdapter,
    hidden_element_copy,
    secure_context_copy,
    touch_selection_copy,
)
from .platform import BrowserPlatform, ReportedBrowserPlatform

__all__ = [
    "DEFAULT_STRATEGIES",
    "BrowserPlatform",
    "ClipboardAdapter",
    "ReportedBrowserPlatform",
    "hidden_element_copy",
    "secure_context_copy",
    "touch_selection_copy",
]
