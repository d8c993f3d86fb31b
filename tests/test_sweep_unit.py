"""スイープユニットのテスト"""

import numpy as np
import pytest

from pynesapu.core.sweep_unit import (
    SweepUnit,
    SweepClockResult,
    calculate_change_amount,
    calculate_target_period,
    calculate_target_periods,
    is_period_muted,
    decode_sweep_register,
    create_sweep_unit,
)
from pynesapu.core.types import NegatePolarity, InvalidValueError

ONES = NegatePolarity.ONES_COMPLEMENT
TWOS = NegatePolarity.TWOS_COMPLEMENT


class TestTargetPeriod:

    @pytest.mark.parametrize("period, shift, negate, polarity, expected", [
        (20, 0, True, ONES, -21),
        (20, 0, True, TWOS, -20),
        (100, 1, False, ONES, 50),
        (100, 1, False, TWOS, 50),
        (100, 1, True, ONES, -51),
        (100, 1, True, TWOS, -50),
        (0x7FF, 7, False, ONES, 15),
        (5, 3, True, ONES, -1),
        (5, 3, True, TWOS, 0),
    ])
    def test_change_amount(self, period, shift, negate, polarity, expected):
        assert calculate_change_amount(period, shift, negate, polarity) == expected

    @pytest.mark.parametrize("period, shift, negate, polarity, expected", [
        (20, 0, True, ONES, 0),
        (20, 0, True, TWOS, 0),
        (100, 1, True, ONES, 49),
        (100, 1, True, TWOS, 50),
        (1024, 0, False, ONES, 2048),
        (1500, 1, False, TWOS, 2250),
    ])
    def test_target_period(self, period, shift, negate, polarity, expected):
        assert calculate_target_period(period, shift, negate, polarity) == expected

    def test_target_is_not_clamped_above(self):
        assert calculate_target_period(0x7FF, 0, False, TWOS) == 0xFFE

    def test_vectorized_matches_scalar(self):
        periods = np.arange(0, 2048, 37)
        for polarity in (ONES, TWOS):
            targets = calculate_target_periods(periods, 2, True, polarity)
            expected = [calculate_target_period(int(p), 2, True, polarity) for p in periods]
            assert targets.tolist() == expected

    @pytest.mark.parametrize("polarity", [ONES, TWOS])
    @pytest.mark.parametrize("shift", range(8))
    def test_vectorized_matches_scalar_without_negate(self, polarity, shift):
        periods = np.arange(2048)
        targets = calculate_target_periods(periods, shift, False, polarity)
        expected = [calculate_target_period(int(p), shift, False, polarity) for p in periods]
        assert targets.tolist() == expected

    @pytest.mark.parametrize("polarity", [ONES, TWOS])
    @pytest.mark.parametrize("period", list(range(0, 2048, 89)) + [2047])
    def test_zero_shift_without_negate_doubles_period(self, period, polarity):
        assert calculate_change_amount(period, 0, False, polarity) == period
        assert calculate_target_period(period, 0, False, polarity) == 2 * period

    @pytest.mark.parametrize("polarity", [ONES, TWOS])
    @pytest.mark.parametrize("negate", [False, True])
    def test_zero_shift_change_over_all_periods(self, negate, polarity):
        periods = np.arange(2048)
        targets = calculate_target_periods(periods, 0, negate, polarity)
        # 負方向はp - p (- 1) で常に0に下限処理される
        expected = np.zeros_like(periods) if negate else 2 * periods
        assert targets.tolist() == expected.tolist()


class TestMute:

    @pytest.mark.parametrize("polarity", [ONES, TWOS])
    @pytest.mark.parametrize("negate", [False, True])
    @pytest.mark.parametrize("shift", range(8))
    def test_period_below_eight_always_muted(self, polarity, negate, shift):
        assert is_period_muted(7, shift, negate, polarity)

    def test_disabled_unit_mutes_on_overflow(self, twos_sweep):
        assert not twos_sweep.enabled
        assert twos_sweep.compute_target_period(1024) == 2048
        assert twos_sweep.is_muted(1024)

    def test_just_below_overflow(self, twos_sweep):
        assert twos_sweep.compute_target_period(1023) == 2046
        assert not twos_sweep.is_muted(1023)

    def test_negate_never_overflows(self, ones_sweep):
        ones_sweep.write_register(0x08)
        assert not ones_sweep.is_muted(0x7FF)

    def test_mute_is_pure_query(self, twos_sweep):
        twos_sweep.write_register(0xA1)
        before = twos_sweep.get_state()
        twos_sweep.is_muted(1500)
        twos_sweep.compute_target_period(1500)
        assert twos_sweep.get_state() == before


class TestHalfFrameClock:

    def test_two_step_example(self, twos_sweep):
        twos_sweep.write_register(0x81)
        assert twos_sweep.on_half_frame_clock(100) == SweepClockResult(150, False)
        assert twos_sweep.on_half_frame_clock(150) == SweepClockResult(225, False)

    def test_ones_complement_sweeps_down_one_further(self, ones_sweep):
        ones_sweep.write_register(0x89)
        assert ones_sweep.on_half_frame_clock(100).new_period == 49
        assert ones_sweep.on_half_frame_clock(49).new_period == 24

    def test_updates_only_when_divider_reaches_zero(self, twos_sweep):
        twos_sweep.write_register(0xA1)
        periods = [100]
        for _ in range(4):
            periods.append(twos_sweep.on_half_frame_clock(periods[-1]).new_period)
        assert periods[1:] == [150, 150, 150, 225]

    def test_muted_channel_keeps_period_and_divider_reloads(self, twos_sweep):
        twos_sweep.write_register(0xB1)
        result = twos_sweep.on_half_frame_clock(1500)
        assert result == SweepClockResult(1500, True)
        assert twos_sweep.divider.counter == 3
        assert not twos_sweep.reload_flag

        twos_sweep.on_half_frame_clock(1500)
        assert twos_sweep.divider.counter == 2

    def test_disabled_unit_maintains_divider(self, twos_sweep):
        twos_sweep.write_register(0x30)
        assert twos_sweep.on_half_frame_clock(100).new_period == 100
        assert twos_sweep.divider.counter == 3
        twos_sweep.on_half_frame_clock(100)
        assert twos_sweep.divider.counter == 2

    def test_zero_shift_never_updates(self, twos_sweep):
        twos_sweep.write_register(0x80)
        for _ in range(4):
            assert twos_sweep.on_half_frame_clock(100).new_period == 100

    def test_reload_flag_reloads_nonzero_counter(self, twos_sweep):
        twos_sweep.write_register(0xA1)
        twos_sweep.on_half_frame_clock(100)
        assert twos_sweep.divider.counter == 2

        twos_sweep.write_register(0xC1)
        assert twos_sweep.reload_flag
        assert twos_sweep.divider.counter == 2

        assert twos_sweep.on_half_frame_clock(150).new_period == 150
        assert twos_sweep.divider.counter == 4
        assert not twos_sweep.reload_flag

    def test_register_write_does_not_touch_counter(self, ones_sweep):
        ones_sweep.divider.counter = 5
        ones_sweep.on_register_write(True, 7, True, 3)
        assert ones_sweep.divider.counter == 5
        assert ones_sweep.divider_period == 7
        assert ones_sweep.reload_flag


class TestSequences:

    def test_period_sequence_does_not_mutate(self, twos_sweep):
        twos_sweep.write_register(0x81)
        before = twos_sweep.copy()
        periods = twos_sweep.generate_period_sequence(100, 8)
        assert periods.tolist() == [150, 225, 337, 505, 757, 1135, 1702, 1702]
        assert twos_sweep == before

    def test_mute_sequence(self, twos_sweep):
        twos_sweep.write_register(0x81)
        muted = twos_sweep.generate_mute_sequence(100, 8)
        assert muted.tolist() == [False] * 6 + [True, True]

    def test_negative_ticks(self, twos_sweep):
        with pytest.raises(InvalidValueError):
            twos_sweep.generate_period_sequence(100, -1)


class TestRegisterAndState:

    def test_decode_sweep_register(self):
        settings = decode_sweep_register(0xFF)
        assert settings.enabled
        assert settings.divider_period == 7
        assert settings.negate_flag
        assert settings.shift_count == 7

    @pytest.mark.parametrize("value", [-1, 256])
    def test_decode_out_of_range(self, value):
        with pytest.raises(InvalidValueError):
            decode_sweep_register(value)

    def test_invalid_polarity(self):
        with pytest.raises(InvalidValueError):
            SweepUnit("twos")

    def test_state_round_trip(self):
        unit = create_sweep_unit(ONES, 0xA9)
        unit.on_half_frame_clock(300)
        restored = SweepUnit(ONES)
        restored.set_state(unit.get_state())
        assert restored == unit

    def test_state_polarity_mismatch(self):
        state = create_sweep_unit(ONES, 0x81).get_state()
        with pytest.raises(InvalidValueError):
            SweepUnit(TWOS).set_state(state)

    def test_state_missing_key(self, ones_sweep):
        state = ones_sweep.get_state()
        del state['reload_flag']
        with pytest.raises(InvalidValueError):
            ones_sweep.set_state(state)

    def test_reset(self):
        unit = create_sweep_unit(TWOS, 0xFF)
        unit.on_half_frame_clock(100)
        unit.reset()
        assert unit == SweepUnit(TWOS)

    def test_state_counter_out_of_range(self, ones_sweep):
        state = ones_sweep.get_state()
        state['divider_counter'] = 99
        before = ones_sweep.copy()
        with pytest.raises(InvalidValueError):
            ones_sweep.set_state(state)
        assert ones_sweep == before

    def test_state_after_period_lowering_write(self, ones_sweep):
        ones_sweep.divider.counter = 5
        ones_sweep.on_register_write(True, 2, False, 1)
        assert ones_sweep.divider.counter > ones_sweep.divider_period

        restored = SweepUnit(ONES)
        restored.set_state(ones_sweep.get_state())
        assert restored == ones_sweep
