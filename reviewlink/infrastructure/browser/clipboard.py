"""
Clipboard Adapter - Layered Copy and Review-Site Handoff
=========================================================

ARCHITECTURAL DECISION:
- One ordered list of copy strategies instead of ad-hoc fallbacks
- Each strategy is a plain function (platform, text) -> bool
- A strategy that raises counts as failed; the adapter never raises

ORDER:
1. secure_context_copy  - async clipboard API (HTTPS only)
2. hidden_element_copy  - hidden textarea + execCommand('copy')
3. touch_selection_copy - selection range copy, touch devices only
"""

import logging
from typing import Callable, Optional, Sequence

from ...domain.models import Navigation
from ...domain.ports import ClipboardRedirect
from .platform import BrowserPlatform

logger = logging.getLogger(__name__)

CopyStrategy = Callable[[BrowserPlatform, str], bool]


def secure_context_copy(platform: BrowserPlatform, text: str) -> bool:
    return bool(platform.secure_clipboard_write(text))


def hidden_element_copy(platform: BrowserPlatform, text: str) -> bool:
    return bool(platform.element_select_copy(text))


def touch_selection_copy(platform: BrowserPlatform, text: str) -> bool:
    if not platform.is_touch_device():
        return False
    return bool(platform.touch_select_copy(text))


DEFAULT_STRATEGIES = (secure_context_copy, hidden_element_copy, touch_selection_copy)


class ClipboardAdapter(ClipboardRedirect):
    """
    Best-effort clipboard copy followed by navigation to a review site.

    USAGE:
        adapter = ClipboardAdapter(platform)
        if not adapter.copy_to_clipboard(text):
            print("Please copy manually")
        adapter.navigate_to("https://search.google.com/local/writereview?placeid=...")
    """

    def __init__(self, platform: BrowserPlatform, strategies: Optional[Sequence[CopyStrategy]] = None):
        self._platform = platform
        self._strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def copy_to_clipboard(self, text: str) -> bool:
        """Try each strategy in order until one confirms the copy."""
        for strategy in self._strategies:
            try:
                if strategy(self._platform, text):
                    logger.debug(f"Clipboard copy succeeded via {strategy.__name__}")
                    return True
            except Exception as e:
                logger.debug(f"Clipboard strategy {strategy.__name__} failed: {e}")
        logger.info("All clipboard strategies failed")
        return False

    def navigate_to(self, url: str) -> Navigation:
        """
        Touch devices: same tab (hands off to the Maps app more reliably).
        Desktop: new tab, same tab if the popup was blocked.
        """
        if self._platform.is_touch_device():
            self._platform.assign_location(url)
            return Navigation(url=url, mode="same_tab")

        if self._platform.open_new_tab(url):
            return Navigation(url=url, mode="new_tab")

        logger.info("Popup blocked, falling back to same-tab navigation")
        self._platform.assign_location(url)
        return Navigation(url=url, mode="same_tab", popup_blocked=True)
