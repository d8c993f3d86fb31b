"""レジスタビューアのテスト"""

import pytest

from pynesapu.core.types import (
    RegisterAccessError,
    REG_PULSE_MAIN,
    REG_PULSE_SWEEP,
    REG_PULSE_TIMER_HI,
)
from pynesapu.debug.register_viewer import create_register_viewer


@pytest.fixture
def viewer(core):
    core.write_register(0, REG_PULSE_MAIN, 0xBF)
    core.write_register(0, REG_PULSE_SWEEP, 0x9A)
    core.write_register(1, REG_PULSE_TIMER_HI, 0x0A)
    return create_register_viewer(core)


def test_display_lists_every_register(viewer):
    lines = viewer.display_registers().splitlines()
    assert len(lines) == 2 + 8
    assert "P1.R0: 0xBF (191) - Duty / Envelope" in lines


def test_binary_display(viewer):
    assert "P1.R1: 10011010 (0x9A) - Sweep" in viewer.display_registers_binary()


def test_sweep_decode(viewer):
    info = viewer.get_register_info(0, REG_PULSE_SWEEP)
    assert info.binary_value == "10011010b"
    assert info.decoded_info == {
        "Enabled": "ON",
        "Divider Period": "1 (2 half frames)",
        "Direction": "DOWN (negate)",
        "Shift": "2",
    }


def test_main_decode(viewer):
    decoded = viewer.get_register_info(0, REG_PULSE_MAIN).decoded_info
    assert decoded["Duty"] == "2 (50%)"
    assert decoded["Volume Mode"] == "CONSTANT"
    assert decoded["Volume Level"] == "15/15"


def test_timer_high_decode(viewer):
    decoded = viewer.get_register_info(1, REG_PULSE_TIMER_HI).decoded_info
    assert decoded["Timer High"] == "2 (3-bit value)"
    assert decoded["Length Index"] == "1"


def test_decode_text(viewer):
    text = viewer.decode_register(0, REG_PULSE_SWEEP)
    assert text.startswith("Register P1.R1 Decode")
    assert "Direction: DOWN (negate)" in text


def test_all_registers_info(viewer):
    infos = viewer.get_all_registers_info()
    assert [(i.channel, i.index) for i in infos] == [(c, r) for c in range(2) for r in range(4)]


@pytest.mark.parametrize("channel, index", [(2, 0), (0, 4)])
def test_invalid_address(viewer, channel, index):
    with pytest.raises(RegisterAccessError):
        viewer.get_register_info(channel, index)


def test_modulation_info(viewer):
    info = viewer.get_modulation_info()
    assert set(info) == {"Pulse 1", "Pulse 2"}
    assert info["Pulse 2"]["period"] == 0x200
    assert info["Pulse 2"]["polarity"] == "TWOS_COMPLEMENT"
    assert info["Pulse 1"]["muted"] is True


def test_debug_banner(debug_core, capsys):
    create_register_viewer(debug_core)
    assert "[DEBUG] RegisterViewer initialized" in capsys.readouterr().out
