"""
NES APU パルスチャンネル変調コア - デバイス設定

このモジュールは、パルスコアのデバイス設定クラスを提供します。
CPUクロック周波数、フレームシーケンサの周波数、デバッグ設定などを管理します。
"""

from dataclasses import dataclass, field
from typing import List
from .types import InvalidValueError, MAX_TIMER_PERIOD, NUM_PULSE_REGISTERS


@dataclass
class APUConfig:
    """APU設定クラス

    パルスコアの動作パラメータを定義します。

    Attributes:
        device_id: デバイス識別子
        cpu_clock_frequency: CPUクロック周波数 (Hz)
        frame_rate: クォーターフレームの周波数 (Hz、約240Hz)
        enable_debug: デバッグモード有効化
        breakpoint_registers: ブレークポイント対象レジスタ番号リスト (0-3)
        initial_period: リセット時のチャンネル周期 (0-2047)
    """

    # 基本設定
    device_id: str = "nes_apu_pulse"
    cpu_clock_frequency: float = 1789773.0  # NTSC

    # フレームシーケンサ設定
    frame_rate: float = 240.0

    # エミュレーション設定
    enable_debug: bool = False
    breakpoint_registers: List[int] = field(default_factory=list)

    # リセット値
    initial_period: int = 0

    def __post_init__(self):
        """初期化後の検証"""
        # クロック周波数の検証
        if self.cpu_clock_frequency <= 0:
            raise InvalidValueError(f"CPU clock frequency must be positive, got {self.cpu_clock_frequency}")

        if self.cpu_clock_frequency > 10000000:  # 10MHz上限
            raise InvalidValueError(f"CPU clock frequency too high: {self.cpu_clock_frequency} Hz")

        # フレームレートの検証
        if self.frame_rate <= 0:
            raise InvalidValueError(f"Frame rate must be positive, got {self.frame_rate}")

        # 初期周期の検証
        if not (0 <= self.initial_period <= MAX_TIMER_PERIOD):
            raise InvalidValueError(
                f"Initial period {self.initial_period} out of range [0, {MAX_TIMER_PERIOD}]")

        # ブレークポイントレジスタの検証
        for reg in self.breakpoint_registers:
            if not (0 <= reg < NUM_PULSE_REGISTERS):
                raise InvalidValueError(
                    f"Breakpoint register {reg} out of range [0, {NUM_PULSE_REGISTERS - 1}]")

    @property
    def quarter_frame_rate(self) -> float:
        """クォーターフレームの周波数 (Hz)"""
        return self.frame_rate

    @property
    def half_frame_rate(self) -> float:
        """ハーフフレームの周波数 (Hz)

        クォーターフレーム2回に1回ハーフフレームが重なる。
        """
        return self.frame_rate / 2.0

    def pulse_frequency(self, period: int) -> float:
        """タイマー周期からパルス波の周波数を計算

        Args:
            period: タイマー周期 (0-2047)

        Returns:
            周波数 (Hz)

        Formula:
            F_pulse = F_cpu / (16 * (period + 1))
        """
        if not (0 <= period <= MAX_TIMER_PERIOD):
            raise InvalidValueError(f"Timer period {period} out of range [0, {MAX_TIMER_PERIOD}]")

        return self.cpu_clock_frequency / (16.0 * (period + 1))

    def period_for_frequency(self, frequency_hz: float) -> int:
        """目標周波数からタイマー周期を計算

        Raises:
            InvalidValueError: 周波数が無効な場合
        """
        if frequency_hz <= 0:
            raise InvalidValueError(f"Frequency must be positive, got {frequency_hz}")

        period = int(round(self.cpu_clock_frequency / (16.0 * frequency_hz))) - 1
        return max(0, min(MAX_TIMER_PERIOD, period))

    def copy(self) -> 'APUConfig':
        """設定の深いコピーを作成"""
        return APUConfig(
            device_id=self.device_id,
            cpu_clock_frequency=self.cpu_clock_frequency,
            frame_rate=self.frame_rate,
            enable_debug=self.enable_debug,
            breakpoint_registers=self.breakpoint_registers.copy(),
            initial_period=self.initial_period
        )

    def __str__(self) -> str:
        """文字列表現"""
        return (f"APUConfig("
                f"cpu={self.cpu_clock_frequency/1000000:.3f}MHz, "
                f"frame_rate={self.frame_rate:g}Hz, "
                f"debug={self.enable_debug})")


# =============================================================================
# プリセット設定
# =============================================================================

def create_default_config() -> APUConfig:
    """デフォルト設定を作成 (NTSC)"""
    return APUConfig()


def create_debug_config() -> APUConfig:
    """デバッグ設定を作成

    Returns:
        デバッグ設定オブジェクト (全レジスタにブレークポイント)
    """
    return APUConfig(
        enable_debug=True,
        breakpoint_registers=list(range(NUM_PULSE_REGISTERS))
    )


def create_ntsc_config() -> APUConfig:
    """NTSC (RP2A03) 設定を作成"""
    return APUConfig(
        cpu_clock_frequency=1789773.0,
        frame_rate=240.0
    )


def create_pal_config() -> APUConfig:
    """PAL (RP2A07) 設定を作成

    PAL機ではCPUクロックとフレームシーケンサが遅い
    """
    return APUConfig(
        device_id="nes_apu_pulse_pal",
        cpu_clock_frequency=1662607.0,
        frame_rate=200.0
    )
