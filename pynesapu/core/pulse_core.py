"""
NES APU パルスチャンネル変調コア - コアエミュレータ

このモジュールは、2つのパルスチャンネルを束ねてフレームシーケンサからの
クロックとレジスタ書き込みを振り分けるコアエミュレータクラスを実装します。
"""

from typing import Dict, Any, List
from .types import (
    Device,
    RegisterAccessError,
    InvalidValueError,
    NUM_PULSE_CHANNELS,
)
from .device_config import APUConfig
from .pulse_channel import PulseChannel
from .sweep_unit import SweepClockResult


class PulseCore(Device):
    """パルスチャンネル変調コア

    パルス1 (1の補数) とパルス2 (2の補数) の2チャンネルを管理します。
    フレームシーケンサのクォーターフレームを両エンベロープへ、
    ハーフフレームを両スイープへ振り分けます。

    主な機能:
    - チャンネルごとの4個のレジスタ管理
    - クォーターフレーム / ハーフフレームのクロック分配
    - 周期・ミュート・音量の随時読み出し
    - 状態の保存・復元

    Attributes:
        _config: エミュレータ設定
        _channels: 2チャンネルのパルスチャンネル
        _frame_step: tick()で進めたフレームステップ数
        _debug_info: デバッグ統計
    """

    def __init__(self, config: APUConfig):
        """PulseCoreを初期化

        Args:
            config: エミュレータ設定
        """
        self._config = config
        self._channels = [PulseChannel(i, config.initial_period) for i in range(NUM_PULSE_CHANNELS)]
        self._frame_step = 0
        self._debug_info = self._new_debug_info()

    @staticmethod
    def _new_debug_info() -> Dict[str, int]:
        return {
            'quarter_frame_ticks': 0,
            'half_frame_ticks': 0,
            'register_writes': 0,
            'sweep_updates': 0,
            'sweep_mutes': 0
        }

    @property
    def name(self) -> str:
        """デバイス名を取得"""
        return "NES APU Pulse"

    def reset(self) -> None:
        """エミュレータをパワーオン状態にリセット"""
        for channel in self._channels:
            channel.reset()

        self._frame_step = 0
        self._debug_info = self._new_debug_info()

        if self._config.enable_debug:
            print(f"[DEBUG] {self.name} reset completed")

    # =========================================================================
    # フレームクロック
    # =========================================================================

    def quarter_frame_tick(self) -> None:
        """クォーターフレーム: 両チャンネルのエンベロープをクロック"""
        for channel in self._channels:
            channel.clock_quarter_frame()

        self._debug_info['quarter_frame_ticks'] += 1

    def half_frame_tick(self) -> List[SweepClockResult]:
        """ハーフフレーム: 両チャンネルのスイープをクロック

        Returns:
            チャンネルごとのスイープ結果
        """
        results = []
        for channel in self._channels:
            old_period = channel.get_period()
            result = channel.clock_half_frame()
            results.append(result)

            if result.new_period != old_period:
                self._debug_info['sweep_updates'] += 1
            if result.muted:
                self._debug_info['sweep_mutes'] += 1

        self._debug_info['half_frame_ticks'] += 1
        return results

    def frame_tick(self, half_frame: bool) -> None:
        """フレームシーケンサの1ステップ

        エンベロープを先に、ハーフフレームならその後スイープをクロックする。

        Args:
            half_frame: ハーフフレームが重なるステップか
        """
        self.quarter_frame_tick()
        if half_frame:
            self.half_frame_tick()

    def tick(self, frame_steps: int) -> int:
        """Tick駆動実行

        4ステップシーケンスと同様に、2ステップに1回ハーフフレームが重なる。

        Args:
            frame_steps: 実行するフレームステップ数

        Returns:
            実際に消費されたステップ数

        Raises:
            InvalidValueError: ステップ数が無効な場合
        """
        if frame_steps < 0:
            raise InvalidValueError(f"frame_steps must be non-negative, got {frame_steps}")

        for _ in range(frame_steps):
            self._frame_step += 1
            self.frame_tick(half_frame=(self._frame_step % 2 == 0))

        return frame_steps

    # =========================================================================
    # レジスタアクセス
    # =========================================================================

    def _get_channel(self, channel: int) -> PulseChannel:
        if not (0 <= channel < NUM_PULSE_CHANNELS):
            raise RegisterAccessError(f"Pulse channel {channel} out of range [0, {NUM_PULSE_CHANNELS - 1}]")
        return self._channels[channel]

    def write_register(self, channel: int, index: int, value: int) -> None:
        """レジスタ書き込み

        Args:
            channel: チャンネル番号 (0-1)
            index: レジスタ番号 (0-3)
            value: 書き込み値 (0-255)

        Raises:
            RegisterAccessError: 無効なチャンネル・レジスタ番号の場合
            InvalidValueError: 無効な値の場合
        """
        pulse = self._get_channel(channel)
        old_value = pulse.read_register(index)
        pulse.write_register(index, value)

        self._debug_info['register_writes'] += 1

        if self._config.enable_debug:
            print(f"[DEBUG] Write P{channel + 1}.R{index} = 0x{value:02X} (was 0x{old_value:02X})")

            if index in self._config.breakpoint_registers:
                print(f"[DEBUG] Breakpoint hit on P{channel + 1}.R{index} write")

    def read_register(self, channel: int, index: int) -> int:
        """最後に書き込まれたレジスタ値を取得"""
        return self._get_channel(channel).read_register(index)

    def get_channel(self, channel: int) -> PulseChannel:
        """パルスチャンネルを取得"""
        return self._get_channel(channel)

    # =========================================================================
    # 出力
    # =========================================================================

    def get_period(self, channel: int) -> int:
        return self._get_channel(channel).get_period()

    def is_muted(self, channel: int) -> bool:
        return self._get_channel(channel).is_muted()

    def get_volume(self, channel: int) -> int:
        return self._get_channel(channel).get_volume()

    def get_channel_outputs(self) -> List[int]:
        """各チャンネルのミュート反映後の音量 [P1, P2]"""
        return [channel.get_output_volume() for channel in self._channels]

    # =========================================================================
    # 状態管理
    # =========================================================================

    def get_state(self) -> Dict[str, Any]:
        """現在の状態を取得

        Returns:
            状態辞書
        """
        return {
            'frame_step': self._frame_step,
            'channels': [channel.get_state() for channel in self._channels],
            'debug_info': self._debug_info.copy()
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        """状態を復元

        Args:
            state: 状態辞書

        Raises:
            InvalidValueError: 状態が無効な場合
        """
        channel_states = state.get('channels')
        if channel_states is None or len(channel_states) != NUM_PULSE_CHANNELS:
            raise InvalidValueError(f"State must contain {NUM_PULSE_CHANNELS} channel states")

        frame_step = state.get('frame_step', 0)
        if frame_step < 0:
            raise InvalidValueError(f"Invalid frame step in state: {frame_step}")

        # 両チャンネルの検証が通ってから反映する
        staged = []
        for channel, channel_state in zip(self._channels, channel_states):
            pulse = PulseChannel(channel.channel, self._config.initial_period)
            pulse.set_state(channel_state)
            staged.append(pulse)

        for channel, pulse in zip(self._channels, staged):
            channel.set_state(pulse.get_state())

        self._frame_step = frame_step

        if 'debug_info' in state:
            self._debug_info.update(state['debug_info'])

        if self._config.enable_debug:
            print(f"[DEBUG] State restored successfully")

    def get_channel_info(self, channel: int) -> Dict[str, Any]:
        """チャンネル詳細情報を取得

        Args:
            channel: チャンネル番号 (0-1)

        Returns:
            チャンネル情報辞書
        """
        pulse = self._get_channel(channel)
        sweep = pulse.sweep

        return {
            'channel': channel,
            'channel_name': f"Pulse {channel + 1}",
            'polarity': sweep.polarity.name,
            'period': pulse.get_period(),
            'frequency': self._config.pulse_frequency(pulse.get_period()),
            'target_period': sweep.compute_target_period(pulse.get_period()),
            'muted': pulse.is_muted(),
            'volume': pulse.get_volume(),
            'output_volume': pulse.get_output_volume(),
            'duty': pulse.duty,
            'sweep_state': sweep.get_state(),
            'envelope_state': pulse.envelope.get_state()
        }

    def get_debug_info(self) -> Dict[str, Any]:
        """デバッグ情報を取得"""
        return {
            'config': {
                'cpu_clock_frequency': self._config.cpu_clock_frequency,
                'frame_rate': self._config.frame_rate,
                'enable_debug': self._config.enable_debug
            },
            'statistics': self._debug_info.copy(),
            'current_state': {
                'frame_step': self._frame_step,
                'periods': [channel.get_period() for channel in self._channels],
                'muted': [channel.is_muted() for channel in self._channels],
                'volumes': [channel.get_volume() for channel in self._channels]
            }
        }

    def get_config(self) -> APUConfig:
        return self._config

    def __str__(self) -> str:
        return (f"PulseCore(cpu={self._config.cpu_clock_frequency/1000000:.3f}MHz, "
                f"steps={self._frame_step})")

    def __repr__(self) -> str:
        return (f"PulseCore(config={self._config}, "
                f"channels={self._channels!r}, "
                f"debug_info={self._debug_info})")


# =============================================================================
# ファクトリ関数
# =============================================================================

def create_pulse_core(config: APUConfig = None) -> PulseCore:
    """PulseCoreを作成

    Args:
        config: エミュレータ設定 (Noneの場合はデフォルト作成)

    Returns:
        PulseCoreインスタンス
    """
    if config is None:
        from .device_config import create_default_config
        config = create_default_config()

    return PulseCore(config)


def create_debug_core() -> PulseCore:
    """デバッグ用PulseCoreを作成"""
    from .device_config import create_debug_config
    config = create_debug_config()
    return PulseCore(config)
