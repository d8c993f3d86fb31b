"""分周器のテスト"""

import pytest

from pynesapu.core.divider import Divider, create_divider
from pynesapu.core.types import InvalidValueError


class TestDividerClock:

    def test_fires_every_period_plus_one_clocks(self):
        divider = create_divider(3)
        fired = [divider.clock() for _ in range(8)]
        assert fired == [False, False, False, True, False, False, False, True]

    def test_reloads_period_when_firing(self):
        divider = Divider(period=5, counter=0)
        assert divider.clock() is True
        assert divider.counter == 5

    def test_period_zero_fires_on_every_clock(self):
        divider = Divider()
        assert all(divider.clock() for _ in range(4))
        assert divider.counter == 0

    def test_force_reload_ignores_counter(self):
        divider = Divider(period=7, counter=2)
        divider.force_reload()
        assert divider.counter == 7

    def test_period_change_takes_effect_on_next_reload(self):
        divider = Divider(period=2, counter=1)
        divider.period = 6
        assert divider.clock() is False
        assert divider.counter == 0
        assert divider.clock() is True
        assert divider.counter == 6


class TestDividerState:

    def test_state_round_trip(self):
        divider = Divider(period=4, counter=3)
        restored = Divider()
        restored.set_state(divider.get_state())
        assert restored == divider

    def test_copy_is_independent(self):
        divider = Divider(period=4, counter=3)
        clone = divider.copy()
        clone.clock()
        assert divider.counter == 3
        assert clone.counter == 2

    def test_reset(self):
        divider = Divider(period=4, counter=3)
        divider.reset()
        assert divider == Divider()

    @pytest.mark.parametrize("state", [
        {'period': 1},
        {'counter': 1},
        {'period': -1, 'counter': 0},
        {'period': 0, 'counter': -1},
        {'period': 3, 'counter': 4},
    ])
    def test_invalid_state(self, state):
        with pytest.raises(InvalidValueError):
            Divider().set_state(state)

    def test_create_divider_rejects_negative_period(self):
        with pytest.raises(InvalidValueError):
            create_divider(-1)

    def test_max_counter_allows_counter_above_period(self):
        divider = Divider()
        divider.set_state({'period': 2, 'counter': 5}, max_counter=7)
        assert divider.period == 2
        assert divider.counter == 5

    def test_max_counter_still_bounds_counter(self):
        divider = Divider(period=1, counter=1)
        with pytest.raises(InvalidValueError):
            divider.set_state({'period': 2, 'counter': 8}, max_counter=7)
        assert divider == Divider(period=1, counter=1)
