"""Integration tests for the check-boxes demo application."""

import pytest

from tessel.apps.checkboxes.components import (
    Check,
    CheckButton,
    MinusWrapper,
    PlusWrapper,
    Toggle,
    Uncheck,
    Window,
)
from tessel.apps.checkboxes.main import describe, run_checkboxes
from tessel.apps.checkboxes.widgets import ToggleButton, TopLevel
from tessel.core.context import Context
from tests.conftest import settle


def test_toggle_button_fires_clicked_on_programmatic_change():
    button = ToggleButton("+")
    clicks = []
    button.connect("clicked", lambda widget: clicks.append(widget.active))

    button.set_active(True)
    button.set_active(True)
    button.click()

    assert clicks == [True, False]


def test_top_level_close_can_be_inhibited():
    window = TopLevel("demo")
    window.connect("delete-event", lambda widget: True)

    assert window.request_close() is True
    assert window.visible


@pytest.mark.asyncio
async def test_check_button_click_reports_toggle():
    context = Context()
    component = context.create_component(CheckButton, "+")

    component.widget.button.click()
    await settle()

    assert component.widget.check is True
    assert component.stats.messages_processed == 1
    await context.shutdown()


@pytest.mark.asyncio
async def test_programmatic_check_does_not_echo_toggle():
    """Check is applied inside a lock window: the button's click is dropped."""
    context = Context()
    component = context.create_component(CheckButton, "+")

    component.emit(Check())
    await settle()

    assert component.widget.check is True
    assert component.widget.button.active is True
    assert component.stats.messages_processed == 1
    assert len(component.stream) == 0

    component.emit(Uncheck())
    await settle()

    assert component.widget.check is False
    assert component.widget.button.active is False
    assert component.stats.messages_processed == 2
    await context.shutdown()


@pytest.mark.asyncio
async def test_window_keeps_buttons_mutually_exclusive():
    context = Context()
    component = context.create_component(Window)
    window = component.widget
    plus, minus = window.plus, window.minus

    plus.widget.button.click()
    await settle()
    assert (plus.widget.check, minus.widget.check) == (True, False)

    minus.widget.button.click()
    await settle()
    assert (plus.widget.check, minus.widget.check) == (False, True)
    assert (plus.widget.button.active, minus.widget.button.active) == (False, True)

    # plus handled Toggle then Uncheck; its echo during Uncheck was dropped
    assert plus.stats.messages_processed == 2
    await context.shutdown()


@pytest.mark.asyncio
async def test_window_receives_wrapped_child_messages():
    context = Context()
    component = context.create_component(Window)
    sink = context.stream("sink")
    component.stream.observe(lambda m: m, sink)

    component.widget.plus.widget.button.click()
    await settle()

    received = []
    while (result := sink.poll(lambda: None)).is_ready:
        received.append(result.message)
    assert received[0] == PlusWrapper(msg=Toggle())
    assert MinusWrapper(msg=Uncheck()) in received
    await context.shutdown()


@pytest.mark.asyncio
async def test_close_request_quits_window():
    context = Context()
    component = context.create_component(Window)

    inhibited = component.widget.window.request_close()
    await component.done()

    assert inhibited is False
    assert component.widget.closed
    assert component.stream.is_closed
    await context.shutdown()


@pytest.mark.asyncio
async def test_run_checkboxes_demo():
    window = await run_checkboxes("+-+")

    assert window.closed
    assert describe(window) == "[x] +   [ ] -"
