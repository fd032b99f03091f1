import pytest

from namedarray import TrackingAllocator


@pytest.fixture
def tracking_allocator():
    """Allocator that fails the test if anything allocated through it leaks."""

    allocator = TrackingAllocator()
    yield allocator
    allocator.assert_no_leaks()
