"""
レジスタビューア実装

パルスチャンネルのレジスタ表示・解析機能を提供
"""

from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from ..core.pulse_core import PulseCore
from ..core.sweep_unit import decode_sweep_register
from ..core.envelope_generator import decode_envelope_register
from ..core.types import (
    RegisterAccessError,
    NUM_PULSE_CHANNELS,
    NUM_PULSE_REGISTERS,
    REG_PULSE_MAIN,
    REG_PULSE_SWEEP,
    REG_PULSE_TIMER_LO,
    REG_PULSE_TIMER_HI,
    MAIN_DUTY_SHIFT,
    TIMER_HI_MASK,
    LENGTH_INDEX_SHIFT,
)


@dataclass
class RegisterInfo:
    """レジスタ情報"""
    channel: int
    index: int
    name: str
    value: int
    hex_value: str
    binary_value: str
    description: str
    decoded_info: Optional[Dict[str, Any]] = None


DUTY_DESCRIPTIONS = {
    0: "12.5%",
    1: "25%",
    2: "50%",
    3: "25% (negated)"
}


class RegisterViewer:
    """
    レジスタビューア

    パルスコアのレジスタ表示・解析機能を提供する。
    レジスタの詳細情報、デコード結果、スイープ/エンベロープの現在値などを表示。
    """

    def __init__(self, device: PulseCore):
        """
        レジスタビューア初期化

        Args:
            device: 対象のPulseCore
        """
        self._device = device

        # レジスタ名定義
        self._register_names = {
            REG_PULSE_MAIN: "Duty / Envelope",
            REG_PULSE_SWEEP: "Sweep",
            REG_PULSE_TIMER_LO: "Timer Low",
            REG_PULSE_TIMER_HI: "Length / Timer High"
        }

        # レジスタ説明
        self._register_descriptions = {
            REG_PULSE_MAIN: "DDLC VVVV: duty, loop, constant volume, volume/envelope period",
            REG_PULSE_SWEEP: "EPPP NSSS: enable, divider period, negate, shift",
            REG_PULSE_TIMER_LO: "TTTT TTTT: timer period (low 8 bits)",
            REG_PULSE_TIMER_HI: "LLLL LTTT: length index, timer period (high 3 bits)"
        }

        if device.get_config().enable_debug:
            print("[DEBUG] RegisterViewer initialized")

    @staticmethod
    def _check_address(channel: int, index: int) -> None:
        if not (0 <= channel < NUM_PULSE_CHANNELS):
            raise RegisterAccessError(f"Pulse channel {channel} out of range [0, {NUM_PULSE_CHANNELS - 1}]")
        if not (0 <= index < NUM_PULSE_REGISTERS):
            raise RegisterAccessError(f"Register index {index} out of range [0, {NUM_PULSE_REGISTERS - 1}]")

    def display_registers(self) -> str:
        """
        全レジスタ表示（16進数）

        Returns:
            レジスタ表示文字列
        """
        lines = []
        lines.append("Pulse Registers (Hexadecimal)")
        lines.append("=" * 50)

        for channel in range(NUM_PULSE_CHANNELS):
            for index in range(NUM_PULSE_REGISTERS):
                value = self._device.read_register(channel, index)
                name = self._register_names[index]
                lines.append(f"P{channel + 1}.R{index}: 0x{value:02X} ({value:3d}) - {name}")

        return "\n".join(lines)

    def display_registers_binary(self) -> str:
        """
        全レジスタ表示（2進数）

        Returns:
            レジスタ表示文字列（2進数）
        """
        lines = []
        lines.append("Pulse Registers (Binary)")
        lines.append("=" * 60)

        for channel in range(NUM_PULSE_CHANNELS):
            for index in range(NUM_PULSE_REGISTERS):
                value = self._device.read_register(channel, index)
                name = self._register_names[index]
                lines.append(f"P{channel + 1}.R{index}: {value:08b} (0x{value:02X}) - {name}")

        return "\n".join(lines)

    def decode_register(self, channel: int, index: int) -> str:
        """
        レジスタデコード表示

        Args:
            channel: チャンネル番号 (0-1)
            index: レジスタ番号 (0-3)

        Returns:
            デコード結果文字列

        Raises:
            RegisterAccessError: 無効なチャンネル・レジスタ番号の場合
        """
        info = self.get_register_info(channel, index)

        lines = []
        lines.append(f"Register P{channel + 1}.R{index} Decode")
        lines.append("-" * 30)
        lines.append(f"Name: {info.name}")
        lines.append(f"Value: {info.hex_value} ({info.value}) = {info.binary_value}")
        lines.append(f"Description: {info.description}")
        lines.append("")

        if info.decoded_info:
            lines.append("Detailed Analysis:")
            for key, val in info.decoded_info.items():
                lines.append(f"  {key}: {val}")

        return "\n".join(lines)

    def _decode_register_details(self, index: int, value: int) -> Dict[str, Any]:
        """レジスタ別の詳細デコード"""

        if index == REG_PULSE_MAIN:
            envelope = decode_envelope_register(value)
            duty = value >> MAIN_DUTY_SHIFT
            result = {
                "Duty": f"{duty} ({DUTY_DESCRIPTIONS[duty]})",
                "Loop / Halt (bit 5)": "1" if envelope.loop_flag else "0",
                "Volume Mode": "CONSTANT" if envelope.constant_volume_flag else "ENVELOPE"
            }
            if envelope.constant_volume_flag:
                result["Volume Level"] = f"{envelope.volume}/15"
            else:
                result["Envelope Period"] = f"{envelope.volume} ({envelope.volume + 1} quarter frames per step)"
            return result

        elif index == REG_PULSE_SWEEP:
            sweep = decode_sweep_register(value)
            return {
                "Enabled": "ON" if sweep.enabled else "OFF",
                "Divider Period": f"{sweep.divider_period} ({sweep.divider_period + 1} half frames)",
                "Direction": "DOWN (negate)" if sweep.negate_flag else "UP",
                "Shift": f"{sweep.shift_count}"
            }

        elif index == REG_PULSE_TIMER_LO:
            return {
                "Timer Low": f"{value} (8-bit value)",
                "Effect": "Lower 8 bits of timer period"
            }

        elif index == REG_PULSE_TIMER_HI:
            return {
                "Timer High": f"{value & TIMER_HI_MASK} (3-bit value)",
                "Length Index": f"{value >> LENGTH_INDEX_SHIFT}",
                "Side effect": "Restarts envelope"
            }

        return {}

    def get_register_info(self, channel: int, index: int) -> RegisterInfo:
        """
        レジスタ情報取得

        Raises:
            RegisterAccessError: 無効なチャンネル・レジスタ番号の場合
        """
        self._check_address(channel, index)

        value = self._device.read_register(channel, index)

        return RegisterInfo(
            channel=channel,
            index=index,
            name=self._register_names[index],
            value=value,
            hex_value=f"0x{value:02X}",
            binary_value=f"{value:08b}b",
            description=self._register_descriptions[index],
            decoded_info=self._decode_register_details(index, value)
        )

    def get_all_registers_info(self) -> List[RegisterInfo]:
        """全レジスタ情報取得"""
        return [
            self.get_register_info(channel, index)
            for channel in range(NUM_PULSE_CHANNELS)
            for index in range(NUM_PULSE_REGISTERS)
        ]

    def get_modulation_info(self) -> Dict[str, Any]:
        """
        変調情報取得

        Returns:
            チャンネルごとの周期・目標周期・ミュート・音量
        """
        modulation_info = {}

        for channel in range(NUM_PULSE_CHANNELS):
            info = self._device.get_channel_info(channel)
            modulation_info[info['channel_name']] = {
                'period': info['period'],
                'target_period': info['target_period'],
                'frequency_hz': info['frequency'],
                'muted': info['muted'],
                'volume': info['volume'],
                'polarity': info['polarity']
            }

        return modulation_info

    def __str__(self) -> str:
        return f"RegisterViewer(device={self._device.name})"

    def __repr__(self) -> str:
        return f"RegisterViewer(device={self._device})"


# ファクトリ関数

def create_register_viewer(device: PulseCore) -> RegisterViewer:
    """
    RegisterViewerを作成

    Args:
        device: 対象デバイス

    Returns:
        RegisterViewerインスタンス
    """
    return RegisterViewer(device)
