"""Message model for Tessel."""

from enum import Enum
from typing import Any

from pydantic import BaseModel

# Default maximum length of a message label in log records
DEFAULT_PREVIEW_CHARS = 100


class Message(BaseModel):
    """Immutable, validated message payload.

    Streams accept any copyable object, but subclassing Message gives a
    component typed variants for free:
    - Immutable (frozen after creation), so copies are cheap and safe
    - Validated (fields checked on construction)
    - Comparable by value, which keeps tests and observer predicates simple

    Example:
        class Toggle(Message):
            pass

        class SetLabel(Message):
            text: str
    """

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    def display_variant(self) -> str:
        """Return the variant name followed by its fields, if any."""
        fields = ", ".join(f"{key}={value!r}" for key, value in self)
        name = type(self).__name__
        return f"{name}({fields})" if fields else name


def display_variant(message: Any, limit: int = DEFAULT_PREVIEW_CHARS) -> str:
    """Return a short label for ``message`` suitable for log records.

    Args:
        message: Any emitted message.
        limit: Maximum number of characters before truncation.

    Returns:
        The label, suffixed with an ellipsis when it was truncated.
    """
    if isinstance(message, Message):
        label = message.display_variant()
    elif isinstance(message, Enum):
        label = message.name
    else:
        label = repr(message)

    if len(label) > limit:
        return f"{label[:limit]}…"
    return label
