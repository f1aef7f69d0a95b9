"""Check-boxes demo application entrypoint.

Two check buttons, "+" and "-", are kept mutually exclusive by their parent
window. The message flow for a click on "-" is:

    click → minus: Toggle → window: MinusWrapper(Toggle) → plus: Uncheck

The Uncheck is applied inside a lock window, so the programmatic change of
the "+" button does not come back as a Toggle.

Usage:
    python -m tessel.apps.checkboxes.main
"""

import asyncio
import logging
import sys

from tessel.apps.checkboxes.components import Window
from tessel.core.context import Context, ContextConfig

logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)

log = logging.getLogger("tessel.apps.checkboxes")


async def settle(rounds: int = 10) -> None:
    """Let every component drain its mailbox."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def describe(window: Window) -> str:
    plus, minus = window.plus.widget, window.minus.widget
    return f"[{'x' if plus.check else ' '}] +   [{'x' if minus.check else ' '}] -"


async def run_checkboxes(clicks: str = "+-+-") -> Window:
    """Click the buttons named in ``clicks`` in order, then close the window.

    Args:
        clicks: Sequence of "+" and "-" characters.

    Returns:
        The window component's logic, for inspection.
    """
    context = Context(ContextConfig())
    component = context.create_component(Window)
    window = component.widget
    buttons = {"+": window.plus.widget.button, "-": window.minus.widget.button}

    for label in clicks:
        buttons[label].click()
        await settle()
        log.info(f"clicked {label}: {describe(window)}")

    window.window.request_close()
    await component.done()
    await context.shutdown()
    return window


def main() -> None:
    """Main entry point for the check-boxes demo."""
    window = asyncio.run(run_checkboxes())
    print(describe(window))


if __name__ == "__main__":
    main()
