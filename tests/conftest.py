"""共通フィクスチャ"""

import pytest

from pynesapu.core.pulse_core import create_pulse_core, create_debug_core
from pynesapu.core.types import NegatePolarity
from pynesapu.core.sweep_unit import SweepUnit


@pytest.fixture
def core():
    return create_pulse_core()


@pytest.fixture
def debug_core():
    return create_debug_core()


@pytest.fixture
def ones_sweep():
    return SweepUnit(NegatePolarity.ONES_COMPLEMENT)


@pytest.fixture
def twos_sweep():
    return SweepUnit(NegatePolarity.TWOS_COMPLEMENT)
