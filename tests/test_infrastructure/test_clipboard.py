"""
Unit tests for the layered clipboard copy and review-site navigation.
"""

import pytest
from unittest.mock import Mock

from reviewlink.infrastructure.browser import (
    BrowserPlatform,
    ClipboardAdapter,
    ReportedBrowserPlatform,
    secure_context_copy,
    touch_selection_copy,
)

URL = "https://search.google.com/local/writereview?placeid=abc"


@pytest.mark.parametrize("report, expected", [
    ({"secure_api": True}, True),
    ({"exec_command": True}, True),
    ({"touch_selection": True, "is_touch": True}, True),
    ({"touch_selection": True, "is_touch": False}, False),
    ({}, False),
])
def test_copy_tries_each_layer(report, expected):
    adapter = ClipboardAdapter(ReportedBrowserPlatform(**report))
    assert adapter.copy_to_clipboard("Great service!") is expected


def test_copy_stops_at_first_success():
    platform = Mock(spec=BrowserPlatform)
    platform.secure_clipboard_write.return_value = True

    assert ClipboardAdapter(platform).copy_to_clipboard("Great service!")
    platform.element_select_copy.assert_not_called()


def test_raising_layer_counts_as_failure():
    """Test that an exception in one layer falls through to the next."""
    platform = Mock(spec=BrowserPlatform)
    platform.secure_clipboard_write.side_effect = PermissionError("not a secure context")
    platform.element_select_copy.return_value = True

    assert ClipboardAdapter(platform).copy_to_clipboard("Great service!")


def test_copy_never_raises_when_every_layer_fails():
    platform = Mock(spec=BrowserPlatform)
    platform.secure_clipboard_write.side_effect = RuntimeError("boom")
    platform.element_select_copy.side_effect = RuntimeError("boom")
    platform.is_touch_device.return_value = True
    platform.touch_select_copy.side_effect = RuntimeError("boom")

    assert ClipboardAdapter(platform).copy_to_clipboard("Great service!") is False


def test_custom_strategy_order():
    platform = ReportedBrowserPlatform(exec_command=True)
    adapter = ClipboardAdapter(platform, strategies=[secure_context_copy, touch_selection_copy])
    assert adapter.copy_to_clipboard("Great service!") is False


def test_report_update_resets_copy_results():
    platform = ReportedBrowserPlatform(secure_api=True, is_touch=True)
    platform.update(exec_command=False)

    assert not platform.secure_clipboard_write("x")
    assert platform.is_touch_device()


def test_touch_device_navigates_in_same_tab():
    platform = ReportedBrowserPlatform(is_touch=True)
    navigation = ClipboardAdapter(platform).navigate_to(URL)

    assert navigation.mode == "same_tab"
    assert not navigation.popup_blocked
    assert platform.navigations == [("same_tab", URL)]


def test_desktop_opens_new_tab():
    platform = ReportedBrowserPlatform()
    navigation = ClipboardAdapter(platform).navigate_to(URL)

    assert navigation.mode == "new_tab"
    assert platform.navigations == [("new_tab", URL)]


def test_blocked_popup_falls_back_to_same_tab():
    platform = ReportedBrowserPlatform(popups_blocked=True)
    navigation = ClipboardAdapter(platform).navigate_to(URL)

    assert navigation.mode == "same_tab"
    assert navigation.popup_blocked
    assert platform.navigations == [("same_tab", URL)]
