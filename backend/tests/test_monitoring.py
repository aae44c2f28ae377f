"""
Tests for the endpoint performance decorator.
"""
import asyncio

import pytest

from api.monitoring import track_performance


def test_track_performance_wraps_coroutines():
    """Test that decorated endpoints stay awaitable and keep their result."""
    @track_performance
    async def endpoint(value):
        return value * 2

    assert endpoint.__name__ == "endpoint"
    assert asyncio.iscoroutinefunction(endpoint)
    assert asyncio.run(endpoint(21)) == 42


def test_track_performance_reraises():
    """Test that errors pass through the decorator."""
    @track_performance
    async def endpoint():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(endpoint())
