"""Pytest configuration, Hypothesis profiles and shared helpers."""

import asyncio

import pytest
from hypothesis import settings
from hypothesis import strategies as st

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=20)

# Load dev profile by default, CI can override via --hypothesis-profile=ci
settings.load_profile("dev")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio as the async backend for pytest-asyncio."""
    return "asyncio"


class CountingWaker:
    """Waker recording how many times it was called."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


@pytest.fixture
def waker() -> CountingWaker:
    return CountingWaker()


def messages(min_size: int = 1, max_size: int = 50):
    """Strategy for sequences of plain, copyable messages."""
    return st.lists(
        st.one_of(st.integers(), st.text(max_size=10), st.tuples(st.integers(), st.booleans())),
        min_size=min_size,
        max_size=max_size,
    )


async def settle(rounds: int = 10) -> None:
    """Let scheduled callbacks and woken tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
