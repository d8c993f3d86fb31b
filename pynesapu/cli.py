"""
NES APU Pulse Modulation Core - Command Line Interface

コマンドライン用のエントリーポイントを提供します。
"""

import sys
import argparse
from typing import List, Optional

from .core.types import APUError, REG_PULSE_MAIN, REG_PULSE_SWEEP
from .core.pulse_core import create_pulse_core, create_debug_core
from .core.envelope_generator import generate_envelope_volumes


def _parse_byte(text: str) -> int:
    """"0x81" や "129" をレジスタ値として解釈"""
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid register value: {text!r}")
    if not (0 <= value <= 255):
        raise argparse.ArgumentTypeError(f"register value out of range [0, 255]: {text}")
    return value


def run_sweep_demo(channel: int, sweep_register: int, period: int, half_frames: int,
                   debug: bool = False) -> List[str]:
    """スイープの周期推移を1ハーフフレームずつ表示用の行として返す"""
    core = create_debug_core() if debug else create_pulse_core()
    pulse = core.get_channel(channel)
    pulse.set_period(period)
    core.write_register(channel, REG_PULSE_SWEEP, sweep_register)

    lines = [f"Pulse {channel + 1} sweep: register=0x{sweep_register:02X}, "
             f"start period={period}, polarity={pulse.sweep.polarity.name}"]
    for step in range(1, half_frames + 1):
        result = core.half_frame_tick()[channel]
        lines.append(f"  half frame {step:3d}: period={result.new_period:4d} "
                     f"target={pulse.sweep.compute_target_period(result.new_period):4d} "
                     f"muted={'yes' if result.muted else 'no'}")
    return lines


def run_envelope_demo(main_register: int, quarter_frames: int) -> List[str]:
    """エンベロープの音量推移を表示用の行として返す"""
    volumes = generate_envelope_volumes(main_register, quarter_frames)
    lines = [f"Envelope: register=0x{main_register:02X}"]
    for step, volume in enumerate(volumes, start=1):
        lines.append(f"  quarter frame {step:3d}: volume={volume:2d} {'#' * volume}")
    return lines


def demo_main(args: Optional[List[str]] = None) -> int:
    """デモプログラムのメインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description='NES APU Pulse Modulation Demo',
        prog='pynesapu-demo'
    )
    parser.add_argument(
        '--example',
        choices=['sweep', 'envelope', 'all'],
        default='all',
        help='実行するデモ (default: all)'
    )
    parser.add_argument('--channel', type=int, choices=[0, 1], default=1,
                        help='スイープデモのチャンネル (default: 1)')
    parser.add_argument('--sweep', type=_parse_byte, default=0x81,
                        help='スイープレジスタ値 EPPP NSSS (default: 0x81)')
    parser.add_argument('--period', type=int, default=100,
                        help='開始タイマー周期 (default: 100)')
    parser.add_argument('--half-frames', type=int, default=8,
                        help='スイープデモのハーフフレーム数 (default: 8)')
    parser.add_argument('--main', type=_parse_byte, default=0x01,
                        help='メインレジスタ値 DDLC VVVV (default: 0x01)')
    parser.add_argument('--quarter-frames', type=int, default=34,
                        help='エンベロープデモのクォーターフレーム数 (default: 34)')
    parser.add_argument('--debug', action='store_true', help='[DEBUG]出力を有効化')

    parsed_args = parser.parse_args(args)

    try:
        if parsed_args.example in ('sweep', 'all'):
            print("\n".join(run_sweep_demo(parsed_args.channel, parsed_args.sweep,
                                           parsed_args.period, parsed_args.half_frames,
                                           parsed_args.debug)))
        if parsed_args.example in ('envelope', 'all'):
            print("\n".join(run_envelope_demo(parsed_args.main, parsed_args.quarter_frames)))
        return 0

    except KeyboardInterrupt:
        print("\n中断されました")
        return 1
    except APUError as e:
        print(f"エラー: {e}")
        return 1


def plot_main(args: Optional[List[str]] = None) -> int:
    """変調プロット出力のメインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description='NES APU Pulse Modulation Plot',
        prog='pynesapu-plot'
    )
    parser.add_argument('output', help='出力画像ファイル (例: modulation.png)')
    parser.add_argument('--channel', type=int, choices=[0, 1], default=0,
                        help='チャンネル (default: 0)')
    parser.add_argument('--main', type=_parse_byte, default=0x02,
                        help='メインレジスタ値 DDLC VVVV (default: 0x02)')
    parser.add_argument('--sweep', type=_parse_byte, default=0x8A,
                        help='スイープレジスタ値 EPPP NSSS (default: 0x8A)')
    parser.add_argument('--period', type=int, default=600,
                        help='開始タイマー周期 (default: 600)')
    parser.add_argument('--half-frames', type=int, default=60,
                        help='描画するハーフフレーム数 (default: 60)')

    parsed_args = parser.parse_args(args)

    try:
        from .debug.modulation_viewer import ModulationViewer

        core = create_pulse_core()
        pulse = core.get_channel(parsed_args.channel)
        core.write_register(parsed_args.channel, REG_PULSE_MAIN, parsed_args.main)
        core.write_register(parsed_args.channel, REG_PULSE_SWEEP, parsed_args.sweep)
        pulse.set_period(parsed_args.period)
        pulse.envelope.set_start_flag()

        viewer = ModulationViewer(title=f"Pulse {parsed_args.channel + 1} modulation")
        viewer.plot_channel(pulse, parsed_args.half_frames)
        path = viewer.save(parsed_args.output)
        print(f"プロットを保存しました: {path}")
        return 0

    except APUError as e:
        print(f"エラー: {e}")
        return 1


if __name__ == '__main__':
    # 直接実行された場合はデモを実行
    sys.exit(demo_main())
