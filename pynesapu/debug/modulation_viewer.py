"""
変調ビューアモジュール

パルスチャンネルのエンベロープ音量とスイープ周期の推移をグラフ表示します。
matplotlibのFigureへ直接描画するため、GUIツールキットは不要です。
"""

from typing import Dict, Any, Optional
import numpy as np
from matplotlib.figure import Figure
from ..core.types import APUError, MAX_TIMER_PERIOD, MAX_VOLUME_LEVEL
from ..core.sweep_unit import SweepUnit
from ..core.envelope_generator import EnvelopeGenerator
from ..core.pulse_channel import PulseChannel


class ModulationViewerError(APUError):
    """変調ビューア関連のエラー"""
    pass


class ModulationTrace:
    """変調推移データ

    エンベロープはクォーターフレーム単位、スイープはハーフフレーム単位で記録する。

    Attributes:
        volumes: 各クォーターフレーム後の音量
        periods: 各ハーフフレーム後の周期
        muted: 各ハーフフレーム後のミュート状態
    """

    def __init__(self, volumes: np.ndarray, periods: np.ndarray, muted: np.ndarray):
        self.volumes = volumes
        self.periods = periods
        self.muted = muted

    @classmethod
    def from_units(cls, envelope: EnvelopeGenerator, sweep: SweepUnit,
                   initial_period: int, half_frames: int) -> 'ModulationTrace':
        """ユニットの現在状態から推移を生成（状態は変更しない）

        Args:
            envelope: エンベロープジェネレータ
            sweep: スイープユニット
            initial_period: 開始時のチャンネル周期
            half_frames: ハーフフレーム数 (クォーターフレームはその2倍)
        """
        if half_frames < 0:
            raise ModulationViewerError(f"half_frames must be non-negative, got {half_frames}")

        return cls(
            volumes=envelope.generate_volume_sequence(half_frames * 2),
            periods=sweep.generate_period_sequence(initial_period, half_frames),
            muted=sweep.generate_mute_sequence(initial_period, half_frames)
        )

    @classmethod
    def from_channel(cls, channel: PulseChannel, half_frames: int) -> 'ModulationTrace':
        return cls.from_units(channel.envelope, channel.sweep, channel.get_period(), half_frames)

    def summary(self) -> Dict[str, Any]:
        """推移の要約"""
        first_mute = int(np.argmax(self.muted)) if self.muted.any() else None
        return {
            'quarter_frames': len(self.volumes),
            'half_frames': len(self.periods),
            'min_volume': int(self.volumes.min()) if len(self.volumes) else None,
            'max_volume': int(self.volumes.max()) if len(self.volumes) else None,
            'final_period': int(self.periods[-1]) if len(self.periods) else None,
            'first_muted_half_frame': first_mute
        }


class ModulationViewer:
    """変調ビューア

    上段にエンベロープ音量、下段にスイープ周期とミュート区間を描画する。
    """

    def __init__(self, title: str = "Pulse Modulation", figsize=(10, 6)):
        self.title = title
        self.figure = Figure(figsize=figsize)
        self.volume_ax = self.figure.add_subplot(211)
        self.period_ax = self.figure.add_subplot(212)
        self._setup_plot()

    def _setup_plot(self):
        """プロットを設定"""
        self.volume_ax.set_title(self.title)
        self.volume_ax.set_xlabel('Quarter frame')
        self.volume_ax.set_ylabel('Volume')
        self.volume_ax.set_ylim(-0.5, MAX_VOLUME_LEVEL + 0.5)
        self.volume_ax.grid(True, alpha=0.3)

        self.period_ax.set_xlabel('Half frame')
        self.period_ax.set_ylabel('Timer period')
        self.period_ax.grid(True, alpha=0.3)

    def plot_trace(self, trace: ModulationTrace) -> Figure:
        """推移データを描画

        Returns:
            描画済みのFigure
        """
        self.volume_ax.clear()
        self.period_ax.clear()
        self._setup_plot()

        quarter_axis = np.arange(1, len(trace.volumes) + 1)
        half_axis = np.arange(1, len(trace.periods) + 1)

        self.volume_ax.step(quarter_axis, trace.volumes, 'b-', where='post', linewidth=2, label='Volume')
        self.period_ax.plot(half_axis, trace.periods, 'g-', linewidth=2, label='Period')
        self.period_ax.axhline(y=MAX_TIMER_PERIOD, color='r', linestyle='--', alpha=0.7, label='Overflow limit')

        # ミュート区間
        if trace.muted.any():
            self.period_ax.plot(half_axis[trace.muted], trace.periods[trace.muted],
                                'rx', markersize=6, label='Muted')

        self.volume_ax.legend(loc='upper right')
        self.period_ax.legend(loc='upper left')
        self.figure.tight_layout()

        return self.figure

    def plot_channel(self, channel: PulseChannel, half_frames: int = 60) -> Figure:
        """チャンネルの現在状態からの推移を描画"""
        return self.plot_trace(ModulationTrace.from_channel(channel, half_frames))

    def save(self, filepath: str, dpi: Optional[int] = 100) -> str:
        """描画内容を画像ファイルに保存

        Raises:
            ModulationViewerError: 保存に失敗した場合
        """
        try:
            self.figure.savefig(filepath, dpi=dpi)
        except (OSError, ValueError) as e:
            raise ModulationViewerError(f"Failed to save plot to '{filepath}': {e}") from e

        return str(filepath)


def create_modulation_viewer(title: str = "Pulse Modulation") -> ModulationViewer:
    return ModulationViewer(title)
