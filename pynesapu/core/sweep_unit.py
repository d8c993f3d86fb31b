"""
NES APU パルスチャンネル変調コア - スイープユニット

このモジュールは、パルスチャンネルの周期をハーフフレームごとに自動調整する
スイープユニットを実装します。目標周期は常に再計算され、スイープが無効でも
オーバーフローによりチャンネルをミュートします。
"""

from typing import NamedTuple, Union
import numpy as np
from .types import (
    InvalidValueError,
    NegatePolarity,
    MAX_TIMER_PERIOD,
    MIN_AUDIBLE_PERIOD,
    MAX_SWEEP_SHIFT,
    MAX_SWEEP_PERIOD,
    SWEEP_ENABLE,
    SWEEP_PERIOD_MASK,
    SWEEP_PERIOD_SHIFT,
    SWEEP_NEGATE,
    SWEEP_SHIFT_MASK,
)
from .divider import Divider


class SweepClockResult(NamedTuple):
    """ハーフフレームクロックの結果"""
    new_period: int
    muted: bool


class SweepSettings(NamedTuple):
    """スイープレジスタのデコード結果"""
    enabled: bool
    divider_period: int
    negate_flag: bool
    shift_count: int


# =============================================================================
# 目標周期計算（純粋関数）
# =============================================================================

def calculate_change_amount(current_period: int, shift_count: int, negate_flag: bool,
                            polarity: NegatePolarity) -> int:
    """スイープの変化量を計算

    Args:
        current_period: 現在のチャンネル周期
        shift_count: シフト量 (0-7)
        negate_flag: 減算フラグ
        polarity: 負数表現

    Returns:
        変化量 (負の値もあり得る)
    """
    raw = current_period >> shift_count
    if not negate_flag:
        return raw

    if polarity is NegatePolarity.ONES_COMPLEMENT:
        return -raw - 1
    return -raw


def calculate_target_period(current_period: int, shift_count: int, negate_flag: bool,
                            polarity: NegatePolarity) -> int:
    """目標周期を計算

    下限のみ0でクランプし、上限はクランプしない。
    2047を超える値はミュート判定に使われる。
    """
    change = calculate_change_amount(current_period, shift_count, negate_flag, polarity)
    return max(0, current_period + change)


def is_period_muted(current_period: int, shift_count: int, negate_flag: bool,
                    polarity: NegatePolarity) -> bool:
    """周期とスイープ設定からミュート条件を判定

    有効フラグや分周器の状態には依存しない。
    """
    if current_period < MIN_AUDIBLE_PERIOD:
        return True
    target = calculate_target_period(current_period, shift_count, negate_flag, polarity)
    return target > MAX_TIMER_PERIOD


def calculate_target_periods(periods: Union[np.ndarray, list], shift_count: int,
                             negate_flag: bool, polarity: NegatePolarity) -> np.ndarray:
    """周期配列に対する目標周期のベクトル化計算

    Args:
        periods: 周期値の配列
        shift_count: シフト量 (0-7)
        negate_flag: 減算フラグ
        polarity: 負数表現

    Returns:
        目標周期の配列 (int64)
    """
    periods = np.asarray(periods, dtype=np.int64)
    raw = np.right_shift(periods, shift_count)

    if negate_flag:
        change = -raw - 1 if polarity is NegatePolarity.ONES_COMPLEMENT else -raw
    else:
        change = raw

    return np.maximum(0, periods + change)


def decode_sweep_register(value: int) -> SweepSettings:
    """スイープレジスタ値 (EPPP NSSS) をデコード

    Args:
        value: レジスタ値 (0-255)

    Returns:
        SweepSettings

    Raises:
        InvalidValueError: 値が範囲外の場合
    """
    if not (0 <= value <= 255):
        raise InvalidValueError(f"Sweep register value {value} out of range [0, 255]")

    return SweepSettings(
        enabled=bool(value & SWEEP_ENABLE),
        divider_period=(value & SWEEP_PERIOD_MASK) >> SWEEP_PERIOD_SHIFT,
        negate_flag=bool(value & SWEEP_NEGATE),
        shift_count=value & SWEEP_SHIFT_MASK
    )


class SweepUnit:
    """スイープユニット

    パルスチャンネルごとに1つ存在し、分周器・リロードフラグ・目標周期計算を
    組み合わせてハーフフレームごとにチャンネル周期を更新します。

    設計方針:
        - チャンネル周期はチャンネル側が所有し、引数で受け取り結果で返す
        - ミュート判定はキャッシュせず、問い合わせのたびに再計算する
        - 周期更新の判定と分周器の保守はどちらもtick前のカウンタ値を参照する
        - 分周器の保守は有効フラグやミュートに関係なく毎回実行する

    Attributes:
        _polarity: 負数表現 (構築時に固定)
        _enabled: スイープ有効フラグ
        _shift_count: シフト量 (0-7)
        _negate_flag: 減算フラグ
        _divider: 分周器 (periodがレジスタの分周周期)
        _reload_flag: リロードフラグ
    """

    def __init__(self, polarity: NegatePolarity):
        """スイープユニットを初期化

        Args:
            polarity: 負数表現 (パルス1は1の補数、パルス2は2の補数)

        Raises:
            InvalidValueError: 負数表現が無効な場合
        """
        if not isinstance(polarity, NegatePolarity):
            raise InvalidValueError(f"Invalid negate polarity: {polarity!r}")

        self._polarity = polarity
        self._enabled = False
        self._shift_count = 0
        self._negate_flag = False
        self._divider = Divider()
        self._reload_flag = False

    # =========================================================================
    # 目標周期・ミュート判定
    # =========================================================================

    def compute_change_amount(self, current_period: int) -> int:
        """現在の設定で変化量を計算"""
        return calculate_change_amount(current_period, self._shift_count,
                                       self._negate_flag, self._polarity)

    def compute_target_period(self, current_period: int) -> int:
        """現在の設定で目標周期を計算 (上限クランプなし)"""
        return calculate_target_period(current_period, self._shift_count,
                                       self._negate_flag, self._polarity)

    def is_muted(self, current_period: int) -> bool:
        """ミュート条件を判定

        周期が8未満、または目標周期が2047を超える場合にミュート。
        スイープの有効/無効や分周器の状態に関係なく評価される。
        """
        return is_period_muted(current_period, self._shift_count,
                               self._negate_flag, self._polarity)

    # =========================================================================
    # クロック・レジスタ書き込み
    # =========================================================================

    def on_half_frame_clock(self, current_period: int) -> SweepClockResult:
        """ハーフフレームクロック処理

        Args:
            current_period: 現在のチャンネル周期

        Returns:
            (新しい周期, ミュート状態)
        """
        muted = self.is_muted(current_period)
        counter_was_zero = self._divider.counter == 0

        if counter_was_zero and self._enabled and self._shift_count != 0 and not muted:
            new_period = self.compute_target_period(current_period)
        else:
            new_period = current_period

        # 分周器の保守は周期更新の結果に関係なく毎回行う
        if counter_was_zero or self._reload_flag:
            self._divider.force_reload()
            self._reload_flag = False
        else:
            self._divider.clock()

        return SweepClockResult(new_period, muted)

    def on_register_write(self, enabled: bool, divider_period: int,
                          negate_flag: bool, shift_count: int) -> None:
        """スイープレジスタ書き込み

        4つのフィールドを置き換え、リロードフラグをセットする。
        値はレジスタデコード側でマスク済みであること。
        """
        self._enabled = enabled
        self._divider.period = divider_period
        self._negate_flag = negate_flag
        self._shift_count = shift_count
        self._reload_flag = True

    def write_register(self, value: int) -> None:
        """スイープレジスタ値 (EPPP NSSS) を書き込み

        Raises:
            InvalidValueError: 値が範囲外の場合
        """
        settings = decode_sweep_register(value)
        self.on_register_write(settings.enabled, settings.divider_period,
                               settings.negate_flag, settings.shift_count)

    def reset(self) -> None:
        """スイープユニットをパワーオン状態にリセット"""
        self._enabled = False
        self._shift_count = 0
        self._negate_flag = False
        self._divider.reset()
        self._reload_flag = False

    # =========================================================================
    # プロパティ
    # =========================================================================

    @property
    def polarity(self) -> NegatePolarity:
        return self._polarity

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def shift_count(self) -> int:
        return self._shift_count

    @property
    def negate_flag(self) -> bool:
        return self._negate_flag

    @property
    def divider_period(self) -> int:
        return self._divider.period

    @property
    def divider(self) -> Divider:
        return self._divider

    @property
    def reload_flag(self) -> bool:
        return self._reload_flag

    # =========================================================================
    # NumPyシーケンス生成
    # =========================================================================

    def generate_period_sequence(self, initial_period: int, ticks: int) -> np.ndarray:
        """ハーフフレームごとの周期シーケンスを生成（状態は変更しない）

        Args:
            initial_period: 開始時のチャンネル周期
            ticks: ハーフフレームクロック数

        Returns:
            各クロック後の周期 (int64配列、長さticks)
        """
        periods, _ = self._simulate(initial_period, ticks)
        return periods

    def generate_mute_sequence(self, initial_period: int, ticks: int) -> np.ndarray:
        """ハーフフレームごとのミュート状態シーケンスを生成（状態は変更しない）

        Returns:
            各クロック後の周期に対するミュート状態 (bool配列、長さticks)
        """
        _, muted = self._simulate(initial_period, ticks)
        return muted

    def _simulate(self, initial_period: int, ticks: int):
        if ticks < 0:
            raise InvalidValueError(f"Ticks must be non-negative, got {ticks}")

        unit = self.copy()
        periods = np.zeros(ticks, dtype=np.int64)
        muted = np.zeros(ticks, dtype=bool)

        period = initial_period
        for i in range(ticks):
            period = unit.on_half_frame_clock(period).new_period
            periods[i] = period
            muted[i] = unit.is_muted(period)

        return periods, muted

    # =========================================================================
    # 状態管理
    # =========================================================================

    def copy(self) -> 'SweepUnit':
        """スイープユニットの深いコピーを作成"""
        new_unit = SweepUnit(self._polarity)
        new_unit._enabled = self._enabled
        new_unit._shift_count = self._shift_count
        new_unit._negate_flag = self._negate_flag
        new_unit._divider = self._divider.copy()
        new_unit._reload_flag = self._reload_flag
        return new_unit

    def get_state(self) -> dict:
        """現在の状態を辞書として取得"""
        return {
            'polarity': self._polarity.value,
            'enabled': self._enabled,
            'shift_count': self._shift_count,
            'negate_flag': self._negate_flag,
            'divider_period': self._divider.period,
            'divider_counter': self._divider.counter,
            'reload_flag': self._reload_flag
        }

    def set_state(self, state: dict) -> None:
        """状態を辞書から復元

        負数表現はチャンネル固有のため復元対象外 (一致を検証する)。

        Raises:
            InvalidValueError: 状態が無効な場合
        """
        required_keys = {
            'enabled', 'shift_count', 'negate_flag',
            'divider_period', 'divider_counter', 'reload_flag'
        }
        if not all(key in state for key in required_keys):
            raise InvalidValueError(f"State must contain keys: {required_keys}")

        if 'polarity' in state and state['polarity'] != self._polarity.value:
            raise InvalidValueError(
                f"State polarity {state['polarity']!r} does not match unit polarity {self._polarity.value!r}")

        shift_count = state['shift_count']
        if not (0 <= shift_count <= MAX_SWEEP_SHIFT):
            raise InvalidValueError(f"Invalid shift count in state: {shift_count}")

        divider_period = state['divider_period']
        if not (0 <= divider_period <= MAX_SWEEP_PERIOD):
            raise InvalidValueError(f"Invalid divider period in state: {divider_period}")

        divider = Divider()
        divider.set_state({'period': divider_period, 'counter': state['divider_counter']},
                          max_counter=MAX_SWEEP_PERIOD)

        self._enabled = bool(state['enabled'])
        self._shift_count = shift_count
        self._negate_flag = bool(state['negate_flag'])
        self._divider.period = divider.period
        self._divider.counter = divider.counter
        self._reload_flag = bool(state['reload_flag'])

    def __str__(self) -> str:
        return (f"SweepUnit(enabled={self._enabled}, "
                f"shift={self._shift_count}, "
                f"negate={self._negate_flag}, "
                f"period={self._divider.period})")

    def __repr__(self) -> str:
        return (f"SweepUnit(polarity={self._polarity.name}, "
                f"enabled={self._enabled}, "
                f"shift={self._shift_count}, "
                f"negate={self._negate_flag}, "
                f"divider={self._divider!r}, "
                f"reload={self._reload_flag})")

    def __eq__(self, other) -> bool:
        if not isinstance(other, SweepUnit):
            return False
        return (self._polarity is other._polarity and
                self._enabled == other._enabled and
                self._shift_count == other._shift_count and
                self._negate_flag == other._negate_flag and
                self._divider == other._divider and
                self._reload_flag == other._reload_flag)


# =============================================================================
# ファクトリ関数
# =============================================================================

def create_sweep_unit(polarity: NegatePolarity, register_value: int = None) -> SweepUnit:
    """スイープユニットを作成

    Args:
        polarity: 負数表現
        register_value: 初期スイープレジスタ値 (Noneの場合は無効状態)

    Returns:
        SweepUnitインスタンス
    """
    unit = SweepUnit(polarity)
    if register_value is not None:
        unit.write_register(register_value)
    return unit
