import pytest

from npstat.core.names import Measure
from npstat.core.variables import MissingSpec, ValueRange, Variable
from npstat.runtime.dispatcher import Dispatcher


@pytest.fixture
def scale():
    """Factory for scale variables with optional user-missing values."""

    def make(name="x", discrete=(), missing_range=None, **kwargs):
        missing = None
        if discrete or missing_range:
            missing = MissingSpec(
                discrete=frozenset(discrete),
                range=ValueRange(*missing_range) if missing_range else None,
            )
        return Variable(name=name, measure=Measure.SCALE, missing=missing, **kwargs)

    return make


@pytest.fixture
def nominal():
    def make(name="g", **kwargs):
        return Variable(name=name, measure=Measure.NOMINAL, **kwargs)

    return make


@pytest.fixture
def dispatcher():
    return Dispatcher()
