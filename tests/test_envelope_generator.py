"""エンベロープジェネレータのテスト"""

import pytest

from pynesapu.core.envelope_generator import (
    EnvelopeGenerator,
    create_envelope_generator,
    decode_envelope_register,
    calculate_decay_duration,
    generate_envelope_volumes,
)
from pynesapu.core.types import InvalidValueError


class TestStartFlag:

    def test_start_sets_decay_to_fifteen(self):
        envelope = create_envelope_generator(0x05, start=True)
        envelope.on_quarter_frame_clock()
        assert not envelope.start_flag
        assert envelope.decay_level == 15
        assert envelope.divider.counter == 5
        assert envelope.get_volume() == 15

    def test_start_flag_waits_for_next_clock(self):
        envelope = create_envelope_generator(0x05)
        envelope.set_start_flag()
        assert envelope.start_flag
        assert envelope.decay_level == 0

    def test_restart_mid_decay(self):
        envelope = create_envelope_generator(0x00, start=True)
        for _ in range(6):
            envelope.on_quarter_frame_clock()
        assert envelope.decay_level == 10

        envelope.set_start_flag()
        envelope.on_quarter_frame_clock()
        assert envelope.decay_level == 15


class TestDecay:

    def test_decay_without_loop_stops_at_zero(self):
        volumes = generate_envelope_volumes(0x00, 20)
        assert volumes[:16] == list(range(15, -1, -1))
        assert volumes[16:] == [0, 0, 0, 0]

    def test_decay_with_loop_wraps_to_fifteen(self):
        volumes = generate_envelope_volumes(0x20, 18)
        assert volumes[15] == 0
        assert volumes[16] == 15
        assert volumes[17] == 14

    def test_divider_period_slows_decay(self):
        assert generate_envelope_volumes(0x01, 7) == [15, 15, 14, 14, 13, 13, 12]

    def test_clocks_to_silence_matches_prediction(self):
        for value in (0x00, 0x01, 0x07):
            envelope = create_envelope_generator(value, start=True)
            predicted = envelope.predict_ticks_to_silence()
            volumes = envelope.generate_volume_sequence(predicted)
            assert volumes[-1] == 0
            assert volumes[-2] == 1

    def test_prediction_mid_decay(self):
        envelope = create_envelope_generator(0x03, start=True)
        for _ in range(5):
            envelope.on_quarter_frame_clock()
        predicted = envelope.predict_ticks_to_silence()
        assert envelope.generate_volume_sequence(predicted)[-1] == 0
        assert envelope.generate_volume_sequence(predicted - 1)[-1] == 1

    def test_prediction_when_silent(self):
        assert EnvelopeGenerator().predict_ticks_to_silence() == 0

    def test_sequence_does_not_mutate(self):
        envelope = create_envelope_generator(0x02, start=True)
        before = envelope.copy()
        envelope.generate_volume_sequence(50)
        assert envelope == before


class TestConstantVolume:

    def test_constant_volume_is_reported(self):
        envelope = create_envelope_generator(0x1A, start=True)
        for _ in range(40):
            envelope.on_quarter_frame_clock()
            assert envelope.get_volume() == 10

    def test_decay_runs_under_constant_volume(self):
        envelope = create_envelope_generator(0x10, start=True)
        for _ in range(5):
            envelope.on_quarter_frame_clock()
        assert envelope.get_volume() == 0
        assert envelope.decay_level == 11

        envelope.set_parameters(False, False, 0)
        assert envelope.get_volume() == 11

    def test_volume_field_doubles_as_divider_period(self):
        envelope = EnvelopeGenerator()
        envelope.set_parameters(True, False, 9)
        assert envelope.constant_volume == 9
        assert envelope.divider.period == 9


class TestRegisterAndState:

    def test_decode_envelope_register(self):
        settings = decode_envelope_register(0xBF)
        assert settings.loop_flag
        assert settings.constant_volume_flag
        assert settings.volume == 15

    def test_decode_out_of_range(self):
        with pytest.raises(InvalidValueError):
            decode_envelope_register(0x100)

    def test_state_round_trip(self):
        envelope = create_envelope_generator(0x23, start=True)
        for _ in range(9):
            envelope.on_quarter_frame_clock()
        restored = EnvelopeGenerator()
        restored.set_state(envelope.get_state())
        assert restored == envelope

    def test_invalid_decay_level_in_state(self):
        state = EnvelopeGenerator().get_state()
        state['decay_level'] = 16
        with pytest.raises(InvalidValueError):
            EnvelopeGenerator().set_state(state)

    def test_reset(self):
        envelope = create_envelope_generator(0x3F, start=True)
        envelope.on_quarter_frame_clock()
        envelope.reset()
        assert envelope == EnvelopeGenerator()

    def test_decay_duration(self):
        assert calculate_decay_duration(0, 240.0) == pytest.approx(0.0625)
        assert calculate_decay_duration(15, 240.0) == pytest.approx(1.0)

    def test_decay_duration_invalid(self):
        with pytest.raises(InvalidValueError):
            calculate_decay_duration(16, 240.0)
        with pytest.raises(InvalidValueError):
            calculate_decay_duration(0, 0.0)

    def test_constant_volume_must_match_divider_period(self):
        state = create_envelope_generator(0x17).get_state()
        state['constant_volume'] = 3
        envelope = EnvelopeGenerator()
        with pytest.raises(InvalidValueError):
            envelope.set_state(state)
        assert envelope == EnvelopeGenerator()

    def test_matching_constant_volume_is_accepted(self):
        state = create_envelope_generator(0x17).get_state()
        state['constant_volume'] = 7
        envelope = EnvelopeGenerator()
        envelope.set_state(state)
        assert envelope.get_volume() == 7
        assert 'constant_volume' not in envelope.get_state()

    def test_state_counter_out_of_range(self):
        state = EnvelopeGenerator().get_state()
        state['divider_counter'] = 16
        with pytest.raises(InvalidValueError):
            EnvelopeGenerator().set_state(state)
