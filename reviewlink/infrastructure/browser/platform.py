"""
Browser Platform - Clipboard and Navigation Capabilities
=========================================================

Provides a unified interface over the few browser primitives the review
flow needs: three ways of writing to the clipboard, touch detection,
opening a tab and assigning location.

USAGE:
    # Results reported by the customer's browser (web flow)
    platform = ReportedBrowserPlatform(secure_api=False, exec_command=True)
    ClipboardAdapter(platform).copy_to_clipboard("Great service!")  # True

Implement BrowserPlatform to drive another environment (a kiosk
browser, a test double).
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


class BrowserPlatform(ABC):
    """
    Abstract base class for browser capability providers.
    Implementations may raise from the copy methods; callers treat
    an exception as "this layer did not work".
    """

    @abstractmethod
    def secure_clipboard_write(self, text: str) -> bool:
        """navigator.clipboard.writeText in a secure context."""
        ...

    @abstractmethod
    def element_select_copy(self, text: str) -> bool:
        """Hidden focusable textarea, select, document.execCommand('copy')."""
        ...

    @abstractmethod
    def touch_select_copy(self, text: str) -> bool:
        """Range/selection based copy needed on iOS-style touch browsers."""
        ...

    @abstractmethod
    def is_touch_device(self) -> bool:
        ...

    @abstractmethod
    def open_new_tab(self, url: str) -> bool:
        """window.open. Returns False if a popup blocker stopped it."""
        ...

    @abstractmethod
    def assign_location(self, url: str) -> None:
        """location.href = url."""
        ...


class ReportedBrowserPlatform(BrowserPlatform):
    """
    Replays what the customer's browser reported.

    The clipboard lives in the customer's browser, so the review page
    runs the copy layers there and posts back which ones worked. This
    platform answers from that report and records navigation requests
    so the web layer can send them back to the page.

    A layer the browser did not attempt (None) counts as failed.
    """

    def __init__(
        self,
        secure_api: Optional[bool] = None,
        exec_command: Optional[bool] = None,
        touch_selection: Optional[bool] = None,
        is_touch: bool = False,
        popups_blocked: bool = False,
    ):
        self._secure_api = bool(secure_api)
        self._exec_command = bool(exec_command)
        self._touch_selection = bool(touch_selection)
        self._is_touch = is_touch
        self._popups_blocked = popups_blocked
        self.navigations: List[Tuple[str, str]] = []

    def update(
        self,
        secure_api: Optional[bool] = None,
        exec_command: Optional[bool] = None,
        touch_selection: Optional[bool] = None,
        is_touch: Optional[bool] = None,
        popups_blocked: Optional[bool] = None,
    ) -> None:
        """Take a fresh report from the browser. Copy results are per attempt."""
        self._secure_api = bool(secure_api)
        self._exec_command = bool(exec_command)
        self._touch_selection = bool(touch_selection)
        if is_touch is not None:
            self._is_touch = is_touch
        if popups_blocked is not None:
            self._popups_blocked = popups_blocked

    def secure_clipboard_write(self, text: str) -> bool:
        return self._secure_api

    def element_select_copy(self, text: str) -> bool:
        return self._exec_command

    def touch_select_copy(self, text: str) -> bool:
        return self._touch_selection

    def is_touch_device(self) -> bool:
        return self._is_touch

    def open_new_tab(self, url: str) -> bool:
        if self._popups_blocked:
            return False
        self.navigations.append(("new_tab", url))
        return True

    def assign_location(self, url: str) -> None:
        self.navigations.append(("same_tab", url))
