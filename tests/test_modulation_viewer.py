"""変調ビューアのテスト"""

import pytest

from pynesapu.core.pulse_channel import create_pulse_channel
from pynesapu.core.types import REG_PULSE_TIMER_HI
from pynesapu.debug.modulation_viewer import (
    ModulationTrace,
    ModulationViewer,
    ModulationViewerError,
    create_modulation_viewer,
)


@pytest.fixture
def pulse():
    pulse = create_pulse_channel(1, period=100, main_register=0x00, sweep_register=0x81)
    pulse.write_register(REG_PULSE_TIMER_HI, 0x00)
    return pulse


def test_trace_from_channel(pulse):
    trace = ModulationTrace.from_channel(pulse, 8)
    assert len(trace.volumes) == 16
    assert trace.volumes[:3].tolist() == [15, 14, 13]
    assert trace.periods.tolist() == [150, 225, 337, 505, 757, 1135, 1702, 1702]
    assert trace.muted.tolist() == [False] * 6 + [True, True]


def test_trace_leaves_channel_untouched(pulse):
    before = pulse.get_state()
    ModulationTrace.from_channel(pulse, 20)
    assert pulse.get_state() == before


def test_trace_summary(pulse):
    summary = ModulationTrace.from_channel(pulse, 8).summary()
    assert summary['quarter_frames'] == 16
    assert summary['max_volume'] == 15
    assert summary['final_period'] == 1702
    assert summary['first_muted_half_frame'] == 6


def test_negative_length(pulse):
    with pytest.raises(ModulationViewerError):
        ModulationTrace.from_channel(pulse, -1)


def test_plot_and_save(pulse, tmp_path):
    viewer = create_modulation_viewer("Pulse 2")
    figure = viewer.plot_channel(pulse, half_frames=8)
    assert figure is viewer.figure
    assert len(viewer.period_ax.get_lines()) >= 2

    path = viewer.save(str(tmp_path / "modulation.png"))
    assert (tmp_path / "modulation.png").stat().st_size > 0
    assert path.endswith("modulation.png")


def test_save_to_missing_directory(pulse, tmp_path):
    viewer = ModulationViewer()
    viewer.plot_channel(pulse, half_frames=4)
    with pytest.raises(ModulationViewerError):
        viewer.save(str(tmp_path / "missing" / "plot.png"))
