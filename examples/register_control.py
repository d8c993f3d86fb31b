#!/usr/bin/env python3
"""
NES APU Pulse Modulation Core - レジスタ制御例

レジスタ書き込みとデコード、状態保存・復元、変調グラフの出力を示します。
"""

import tempfile
from pynesapu.core.pulse_core import create_pulse_core
from pynesapu.core.types import REG_PULSE_MAIN, REG_PULSE_SWEEP, REG_PULSE_TIMER_LO, REG_PULSE_TIMER_HI
from pynesapu.debug.register_viewer import create_register_viewer
from pynesapu.debug.modulation_viewer import ModulationViewer
from pynesapu.utils.state_manager import create_state_manager


def setup_device():
    """デバイスをセットアップ"""
    device = create_pulse_core()
    device.write_register(0, REG_PULSE_MAIN, 0xBF)       # duty 2, halt, 固定音量15
    device.write_register(0, REG_PULSE_SWEEP, 0x9A)      # 有効, 分周1, 減算, シフト2
    device.write_register(0, REG_PULSE_TIMER_LO, 0xFD)
    device.write_register(0, REG_PULSE_TIMER_HI, 0x08)   # 周期253, 長さインデックス1
    return device


def example_register_decode(device):
    """レジスタのデコード表示"""
    viewer = create_register_viewer(device)
    print(viewer.display_registers())
    print()
    print(viewer.decode_register(0, REG_PULSE_SWEEP))
    print()
    for name, info in viewer.get_modulation_info().items():
        print(f"{name}: {info}")


def example_snapshot(device, directory):
    """状態の保存と復元"""
    manager = create_state_manager(directory)
    manager.create_snapshot(device, "before_sweep", "sweep start")

    device.tick(16)
    print(f"\n16ステップ後の周期: {device.get_period(0)}")

    manager.restore_snapshot(device, "before_sweep")
    print(f"復元後の周期: {device.get_period(0)}")

    path = manager.save_snapshot_to_file("before_sweep", "before_sweep.json")
    print(f"スナップショットを保存: {path}")


def example_plot(device, directory):
    """変調グラフの出力"""
    viewer = ModulationViewer(title="Pulse 1 sweep down")
    viewer.plot_channel(device.get_channel(0), half_frames=40)
    path = viewer.save(f"{directory}/pulse1_modulation.png")
    print(f"グラフを保存: {path}")


def main():
    """メイン関数"""
    print("NES APU Pulse Modulation Core - レジスタ制御例")
    print("=" * 50)

    device = setup_device()
    example_register_decode(device)

    with tempfile.TemporaryDirectory() as directory:
        example_snapshot(device, directory)
        example_plot(device, directory)


if __name__ == "__main__":
    main()
