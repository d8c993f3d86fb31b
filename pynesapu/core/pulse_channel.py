"""
NES APU パルスチャンネル変調コア - パルスチャンネル

このモジュールは、スイープユニットとエンベロープジェネレータを束ね、
11ビットのタイマー周期を所有するパルスチャンネルを実装します。

    Sweep -----> Timer周期
      |
      v
    Envelope ---> Gate ---> (シーケンサ / 長さカウンタ / ミキサーへ)

周期の書き込み元はレジスタ書き込みかスイープの結果のどちらか一方で、
チャンネルがそれらを直列化します。
"""

from typing import Dict, Any
from .types import (
    PulseChannelState,
    RegisterAccessError,
    InvalidValueError,
    polarity_for_channel,
    NUM_PULSE_REGISTERS,
    MAX_TIMER_PERIOD,
    REG_PULSE_MAIN,
    REG_PULSE_SWEEP,
    REG_PULSE_TIMER_LO,
    REG_PULSE_TIMER_HI,
    MAIN_DUTY_MASK,
    MAIN_DUTY_SHIFT,
    TIMER_HI_MASK,
    LENGTH_INDEX_SHIFT,
)
from .sweep_unit import SweepUnit, SweepClockResult
from .envelope_generator import EnvelopeGenerator


class PulseChannel:
    """パルスチャンネル

    Attributes:
        _channel: チャンネル番号 (0または1)
        _state: レジスタラッチと周期
        _sweep: スイープユニット
        _envelope: エンベロープジェネレータ
    """

    def __init__(self, channel: int, initial_period: int = 0):
        """パルスチャンネルを初期化

        Args:
            channel: チャンネル番号 (0: 1の補数、1: 2の補数)
            initial_period: 初期タイマー周期 (0-2047)

        Raises:
            RegisterAccessError: チャンネル番号が無効な場合
            InvalidValueError: 初期周期が無効な場合
        """
        self._channel = channel
        self._sweep = SweepUnit(polarity_for_channel(channel))
        self._envelope = EnvelopeGenerator()
        self._initial_period = initial_period
        self._state = PulseChannelState(period=initial_period)

    # =========================================================================
    # レジスタ書き込み
    # =========================================================================

    def write_register(self, index: int, value: int) -> None:
        """チャンネルレジスタ書き込み

        Args:
            index: レジスタ番号 (0-3)
            value: 書き込み値 (0-255)

        Raises:
            RegisterAccessError: 無効なレジスタ番号の場合
            InvalidValueError: 無効な値の場合
        """
        if not (0 <= index < NUM_PULSE_REGISTERS):
            raise RegisterAccessError(f"Register index {index} out of range [0, {NUM_PULSE_REGISTERS - 1}]")

        if not (0 <= value <= 255):
            raise InvalidValueError(f"Register value {value} out of range [0, 255]")

        self._state.registers[index] = value

        if index == REG_PULSE_MAIN:
            self._state.duty = (value & MAIN_DUTY_MASK) >> MAIN_DUTY_SHIFT
            self._envelope.write_register(value)

        elif index == REG_PULSE_SWEEP:
            self._sweep.write_register(value)

        elif index == REG_PULSE_TIMER_LO:
            self._state.period = (self._state.period & 0x700) | value

        elif index == REG_PULSE_TIMER_HI:
            self._state.period = (self._state.period & 0x0FF) | ((value & TIMER_HI_MASK) << 8)
            self._state.length_index = value >> LENGTH_INDEX_SHIFT
            # 副作用: エンベロープ再スタート
            self._envelope.set_start_flag()

    def read_register(self, index: int) -> int:
        """最後に書き込まれたレジスタ値を取得

        Raises:
            RegisterAccessError: 無効なレジスタ番号の場合
        """
        if not (0 <= index < NUM_PULSE_REGISTERS):
            raise RegisterAccessError(f"Register index {index} out of range [0, {NUM_PULSE_REGISTERS - 1}]")

        return self._state.registers[index]

    def set_period(self, period: int) -> None:
        """タイマー周期を直接設定

        Raises:
            InvalidValueError: 周期が無効な場合
        """
        if not (0 <= period <= MAX_TIMER_PERIOD):
            raise InvalidValueError(f"Timer period {period} out of range [0, {MAX_TIMER_PERIOD}]")

        self._state.period = period

    # =========================================================================
    # フレームクロック
    # =========================================================================

    def clock_quarter_frame(self) -> None:
        """クォーターフレーム: エンベロープをクロック"""
        self._envelope.on_quarter_frame_clock()

    def clock_half_frame(self) -> SweepClockResult:
        """ハーフフレーム: スイープをクロックし、結果の周期を反映

        Returns:
            スイープの結果
        """
        result = self._sweep.on_half_frame_clock(self._state.period)
        self._state.period = result.new_period
        return result

    # =========================================================================
    # 出力
    # =========================================================================

    def get_period(self) -> int:
        return self._state.period

    def is_muted(self) -> bool:
        """現在の周期に対するスイープのミュート条件"""
        return self._sweep.is_muted(self._state.period)

    def get_volume(self) -> int:
        """エンベロープの現在音量 (0-15)"""
        return self._envelope.get_volume()

    def get_output_volume(self) -> int:
        """ミュートを反映した音量 (ミュート時は0)"""
        if self.is_muted():
            return 0
        return self._envelope.get_volume()

    def get_frequency(self, cpu_clock_hz: float) -> float:
        """パルス波の周波数を計算

        Formula:
            F_pulse = F_cpu / (16 * (period + 1))
        """
        if cpu_clock_hz <= 0:
            raise InvalidValueError(f"CPU clock frequency must be positive, got {cpu_clock_hz}")

        return cpu_clock_hz / (16.0 * (self._state.period + 1))

    @property
    def channel(self) -> int:
        return self._channel

    @property
    def duty(self) -> int:
        return self._state.duty

    @property
    def length_index(self) -> int:
        return self._state.length_index

    @property
    def sweep(self) -> SweepUnit:
        return self._sweep

    @property
    def envelope(self) -> EnvelopeGenerator:
        return self._envelope

    # =========================================================================
    # 状態管理
    # =========================================================================

    def reset(self) -> None:
        """パワーオン状態にリセット"""
        self._state = PulseChannelState(period=self._initial_period)
        self._sweep.reset()
        self._envelope.reset()

    def get_state(self) -> Dict[str, Any]:
        """現在の状態を辞書として取得"""
        state = self._state.to_dict()
        state['channel'] = self._channel
        state['sweep'] = self._sweep.get_state()
        state['envelope'] = self._envelope.get_state()
        return state

    def set_state(self, state: Dict[str, Any]) -> None:
        """状態を辞書から復元

        Raises:
            InvalidValueError: 状態が無効な場合
        """
        if 'channel' in state and state['channel'] != self._channel:
            raise InvalidValueError(
                f"State for channel {state['channel']} cannot be restored to channel {self._channel}")

        # 全体を検証してから反映する
        channel_state = PulseChannelState.from_dict(state)
        sweep = self._sweep.copy()
        envelope = self._envelope.copy()
        if 'sweep' in state:
            sweep.set_state(state['sweep'])
        if 'envelope' in state:
            envelope.set_state(state['envelope'])

        self._sweep.set_state(sweep.get_state())
        self._envelope.set_state(envelope.get_state())
        self._state = channel_state

    def __str__(self) -> str:
        return (f"PulseChannel({self._channel + 1}, "
                f"period={self._state.period}, "
                f"volume={self.get_volume()}, "
                f"muted={self.is_muted()})")

    def __repr__(self) -> str:
        return (f"PulseChannel(channel={self._channel}, "
                f"state={self._state}, "
                f"sweep={self._sweep!r}, "
                f"envelope={self._envelope!r})")


def create_pulse_channel(channel: int, period: int = 0, main_register: int = None,
                         sweep_register: int = None) -> PulseChannel:
    """レジスタ値を指定してパルスチャンネルを作成

    Args:
        channel: チャンネル番号 (0または1)
        period: 初期タイマー周期
        main_register: メインレジスタ値 (Noneなら書き込まない)
        sweep_register: スイープレジスタ値 (Noneなら書き込まない)

    Returns:
        PulseChannelインスタンス
    """
    pulse = PulseChannel(channel)
    pulse.set_period(period)
    if main_register is not None:
        pulse.write_register(REG_PULSE_MAIN, main_register)
    if sweep_register is not None:
        pulse.write_register(REG_PULSE_SWEEP, sweep_register)
    return pulse
