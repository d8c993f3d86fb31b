#!/usr/bin/env python3
"""
NES APU Pulse Modulation Core - 基本的な使用例

このスクリプトは、パルスチャンネルのスイープとエンベロープの基本的な
使い方を示します。周期の自動変化からミュート判定まで、段階的に紹介します。
"""

from pynesapu.core.pulse_core import create_pulse_core
from pynesapu.core.device_config import create_default_config
from pynesapu.core.types import REG_PULSE_MAIN, REG_PULSE_SWEEP, REG_PULSE_TIMER_LO, REG_PULSE_TIMER_HI


def setup_device():
    """デバイスをセットアップ"""
    print("パルスコアを初期化中...")
    config = create_default_config()
    device = create_pulse_core(config)
    return device, config


def set_timer_period(device, channel, period):
    """タイマー周期をレジスタ経由で設定 (エンベロープも再スタートする)"""
    device.write_register(channel, REG_PULSE_TIMER_LO, period & 0xFF)
    device.write_register(channel, REG_PULSE_TIMER_HI, (period >> 8) & 0x07)


def example_1_sweep_up(device, config):
    """例1: 2の補数チャンネルで周期を上げていく"""
    print("\n例1: スイープで周期を上げる (パルス2, シフト1)")
    set_timer_period(device, 1, 100)
    device.write_register(1, REG_PULSE_SWEEP, 0x81)

    for step in range(1, 6):
        result = device.half_frame_tick()[1]
        freq = config.pulse_frequency(result.new_period)
        print(f"  {step}: period={result.new_period:4d} ({freq:7.1f} Hz) muted={result.muted}")


def example_2_negate_difference(device):
    """例2: 1の補数と2の補数の違い"""
    print("\n例2: 減算時の変化量 (周期20, シフト0)")
    for channel in range(2):
        sweep = device.get_channel(channel).sweep
        device.write_register(channel, REG_PULSE_SWEEP, 0x08)
        print(f"  パルス{channel + 1} ({sweep.polarity.name}): "
              f"change={sweep.compute_change_amount(20)}, target={sweep.compute_target_period(20)}")


def example_3_overflow_mute(device):
    """例3: スイープ無効でもオーバーフローでミュートされる"""
    print("\n例3: オーバーフローによるミュート")
    device.write_register(0, REG_PULSE_SWEEP, 0x00)
    set_timer_period(device, 0, 1024)
    pulse = device.get_channel(0)
    print(f"  period=1024 target={pulse.sweep.compute_target_period(1024)} muted={pulse.is_muted()}")

    set_timer_period(device, 0, 7)
    print(f"  period=7 muted={pulse.is_muted()}")


def example_4_envelope(device):
    """例4: 減衰エンベロープとループ"""
    print("\n例4: エンベロープ (V=1, ループ有効)")
    device.write_register(0, REG_PULSE_MAIN, 0x21)
    set_timer_period(device, 0, 400)

    volumes = []
    for _ in range(40):
        device.quarter_frame_tick()
        volumes.append(device.get_volume(0))
    print(f"  {volumes}")


def main():
    """メイン関数"""
    print("NES APU Pulse Modulation Core - 基本使用例")
    print("=" * 50)

    device, config = setup_device()

    example_1_sweep_up(device, config)
    device.reset()
    example_2_negate_difference(device)
    device.reset()
    example_3_overflow_mute(device)
    device.reset()
    example_4_envelope(device)

    print("\n" + "=" * 50)
    print("全ての例が完了しました！")

    print(f"\nデバイス情報:")
    print(f"  名前: {device.name}")
    print(f"  CPUクロック: {config.cpu_clock_frequency/1000000:.3f} MHz")
    print(f"  フレームレート: {config.frame_rate:g} Hz")


if __name__ == "__main__":
    main()
