"""Smoke tests to verify the package surface and testing infrastructure."""

from hypothesis import given

import tessel
from tests.conftest import messages


def test_infrastructure_works():
    """Verify pytest is working."""
    assert True


def test_public_api_exports():
    for name in tessel.__all__:
        assert hasattr(tessel, name), name
    assert tessel.__version__ == "0.1.0"


@given(batch=messages())
def test_message_strategy(batch: list):
    """Verify the Hypothesis message strategy generates non-empty lists."""
    assert isinstance(batch, list)
    assert len(batch) >= 1
