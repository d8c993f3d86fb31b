"""
NES APU パルスチャンネル変調コア - エンベロープジェネレータ

このモジュールは、減衰または固定音量を生成するエンベロープジェネレータを実装します。
クォーターフレームごとにクロックされ、4ビットの減衰レベルカウンタで音量を制御します。

動作概要:
    - スタートフラグがセット: フラグをクリアし、減衰レベルを15にして分周器をリロード
    - スタートフラグがクリア: 分周器をクロックし、発火時に減衰レベルを更新
    - 減衰レベルが0でループフラグがセットされていれば15に戻る
    - 固定音量フラグは読み出す値を切り替えるだけで、減衰は止まらない
"""

from typing import List, NamedTuple
import numpy as np
from .types import (
    InvalidValueError,
    MAX_VOLUME_LEVEL,
    MAX_ENVELOPE_PERIOD,
    MAIN_LOOP_FLAG,
    MAIN_CONSTANT_VOLUME,
    MAIN_VOLUME_MASK,
)
from .divider import Divider


class EnvelopeSettings(NamedTuple):
    """メインレジスタのエンベロープ部分のデコード結果"""
    loop_flag: bool
    constant_volume_flag: bool
    volume: int


def decode_envelope_register(value: int) -> EnvelopeSettings:
    """メインレジスタ値 (DDLC VVVV) のエンベロープ部分をデコード

    Args:
        value: レジスタ値 (0-255)

    Returns:
        EnvelopeSettings

    Raises:
        InvalidValueError: 値が範囲外の場合
    """
    if not (0 <= value <= 255):
        raise InvalidValueError(f"Envelope register value {value} out of range [0, 255]")

    return EnvelopeSettings(
        loop_flag=bool(value & MAIN_LOOP_FLAG),
        constant_volume_flag=bool(value & MAIN_CONSTANT_VOLUME),
        volume=value & MAIN_VOLUME_MASK
    )


class EnvelopeGenerator:
    """エンベロープジェネレータ

    分周器・スタートフラグ・4ビット減衰レベルカウンタを組み合わせて
    チャンネルの現在音量を生成します。

    Attributes:
        _start_flag: スタートフラグ (次のクォーターフレームで反映)
        _divider: 分周器 (periodはレジスタの4ビット値V。固定音量値も兼ねる)
        _decay_level: 減衰レベルカウンタ (0-15)
        _loop_flag: ループフラグ
        _constant_volume_flag: 固定音量フラグ
    """

    def __init__(self):
        """エンベロープジェネレータを初期化"""
        self._start_flag = False
        self._divider = Divider()
        self._decay_level = 0
        self._loop_flag = False
        self._constant_volume_flag = False

    def on_quarter_frame_clock(self) -> None:
        """クォーターフレームクロック処理"""
        if self._start_flag:
            self._start_flag = False
            self._decay_level = MAX_VOLUME_LEVEL
            self._divider.force_reload()
            return

        if self._divider.clock():
            if self._decay_level > 0:
                self._decay_level -= 1
            elif self._loop_flag:
                self._decay_level = MAX_VOLUME_LEVEL

    def set_start_flag(self) -> None:
        """スタートフラグをセット（次のクォーターフレームで反映）"""
        self._start_flag = True

    def get_volume(self) -> int:
        """現在の音量を取得

        Returns:
            固定音量フラグがセットされていれば固定音量値、そうでなければ減衰レベル (0-15)
        """
        if self._constant_volume_flag:
            return self._divider.period
        return self._decay_level

    def set_parameters(self, constant_volume_flag: bool, loop_flag: bool, volume: int) -> None:
        """レジスタ由来のパラメータを設定

        4ビット値は固定音量値と分周器のリロード値の両方として使われる。
        値はレジスタデコード側でマスク済みであること。
        """
        self._constant_volume_flag = constant_volume_flag
        self._loop_flag = loop_flag
        self._divider.period = volume

    def write_register(self, value: int) -> None:
        """メインレジスタ値 (DDLC VVVV) のエンベロープ部分を書き込み

        Raises:
            InvalidValueError: 値が範囲外の場合
        """
        settings = decode_envelope_register(value)
        self.set_parameters(settings.constant_volume_flag, settings.loop_flag, settings.volume)

    def reset(self) -> None:
        """エンベロープジェネレータをパワーオン状態にリセット"""
        self._start_flag = False
        self._divider.reset()
        self._decay_level = 0
        self._loop_flag = False
        self._constant_volume_flag = False

    # =========================================================================
    # プロパティ
    # =========================================================================

    @property
    def start_flag(self) -> bool:
        return self._start_flag

    @property
    def decay_level(self) -> int:
        return self._decay_level

    @property
    def loop_flag(self) -> bool:
        return self._loop_flag

    @property
    def constant_volume_flag(self) -> bool:
        return self._constant_volume_flag

    @property
    def constant_volume(self) -> int:
        return self._divider.period

    @property
    def divider(self) -> Divider:
        return self._divider

    # =========================================================================
    # NumPyシーケンス生成
    # =========================================================================

    def generate_volume_sequence(self, ticks: int) -> np.ndarray:
        """クォーターフレームごとの音量シーケンスを生成（状態は変更しない）

        Args:
            ticks: クォーターフレームクロック数

        Returns:
            各クロック後の音量 (int64配列、長さticks)

        Raises:
            InvalidValueError: クロック数が負の場合
        """
        if ticks < 0:
            raise InvalidValueError(f"Ticks must be non-negative, got {ticks}")

        generator = self.copy()
        sequence = np.zeros(ticks, dtype=np.int64)
        for i in range(ticks):
            generator.on_quarter_frame_clock()
            sequence[i] = generator.get_volume()

        return sequence

    def predict_ticks_to_silence(self) -> int:
        """減衰レベルが0になるまでのクォーターフレーム数を予測

        Returns:
            クロック数 (既に0なら0、ループ中でも最初に0へ到達するまで)
        """
        if self._start_flag:
            # スタート処理で1クロック、その後15段階 x (V+1) クロック
            return 1 + MAX_VOLUME_LEVEL * (self._divider.period + 1)

        if self._decay_level == 0:
            return 0

        # 最初の発火までcounter+1クロック、以降は(V+1)クロックごと
        return (self._divider.counter + 1) + (self._decay_level - 1) * (self._divider.period + 1)

    # =========================================================================
    # 状態管理
    # =========================================================================

    def copy(self) -> 'EnvelopeGenerator':
        """エンベロープジェネレータの深いコピーを作成"""
        new_generator = EnvelopeGenerator()
        new_generator._start_flag = self._start_flag
        new_generator._divider = self._divider.copy()
        new_generator._decay_level = self._decay_level
        new_generator._loop_flag = self._loop_flag
        new_generator._constant_volume_flag = self._constant_volume_flag
        return new_generator

    def get_state(self) -> dict:
        """現在の状態を辞書として取得"""
        return {
            'start_flag': self._start_flag,
            'divider_period': self._divider.period,
            'divider_counter': self._divider.counter,
            'decay_level': self._decay_level,
            'loop_flag': self._loop_flag,
            'constant_volume_flag': self._constant_volume_flag
        }

    def set_state(self, state: dict) -> None:
        """状態を辞書から復元

        Raises:
            InvalidValueError: 状態が無効な場合
        """
        required_keys = {
            'start_flag', 'divider_period', 'divider_counter', 'decay_level',
            'loop_flag', 'constant_volume_flag'
        }
        if not all(key in state for key in required_keys):
            raise InvalidValueError(f"State must contain keys: {required_keys}")

        decay_level = state['decay_level']
        if not (0 <= decay_level <= MAX_VOLUME_LEVEL):
            raise InvalidValueError(f"Invalid decay level in state: {decay_level}")

        divider_period = state['divider_period']
        if not (0 <= divider_period <= MAX_ENVELOPE_PERIOD):
            raise InvalidValueError(f"Invalid divider period in state: {divider_period}")

        # 固定音量値と分周周期は同じ4ビットフィールドV
        if 'constant_volume' in state and state['constant_volume'] != divider_period:
            raise InvalidValueError(
                f"Constant volume {state['constant_volume']} must equal divider period {divider_period}")

        divider = Divider()
        divider.set_state({'period': divider_period, 'counter': state['divider_counter']},
                          max_counter=MAX_ENVELOPE_PERIOD)

        self._start_flag = bool(state['start_flag'])
        self._divider.period = divider.period
        self._divider.counter = divider.counter
        self._decay_level = decay_level
        self._loop_flag = bool(state['loop_flag'])
        self._constant_volume_flag = bool(state['constant_volume_flag'])

    def __str__(self) -> str:
        return (f"EnvelopeGenerator(volume={self.get_volume()}, "
                f"decay={self._decay_level}, "
                f"loop={self._loop_flag}, "
                f"constant={self._constant_volume_flag})")

    def __repr__(self) -> str:
        return (f"EnvelopeGenerator(start={self._start_flag}, "
                f"divider={self._divider!r}, "
                f"decay={self._decay_level}, "
                f"loop={self._loop_flag}, "
                f"constant={self._constant_volume_flag})")

    def __eq__(self, other) -> bool:
        if not isinstance(other, EnvelopeGenerator):
            return False
        return (self._start_flag == other._start_flag and
                self._divider == other._divider and
                self._decay_level == other._decay_level and
                self._loop_flag == other._loop_flag and
                self._constant_volume_flag == other._constant_volume_flag)


# =============================================================================
# ユーティリティ関数
# =============================================================================

def create_envelope_generator(register_value: int = 0, start: bool = False) -> EnvelopeGenerator:
    """メインレジスタ値からエンベロープジェネレータを作成

    Args:
        register_value: メインレジスタ値 (DDLC VVVV)
        start: スタートフラグをセットするか

    Returns:
        設定されたEnvelopeGeneratorインスタンス
    """
    generator = EnvelopeGenerator()
    generator.write_register(register_value)
    if start:
        generator.set_start_flag()
    return generator


def calculate_decay_duration(volume: int, quarter_frame_rate: float) -> float:
    """減衰エンベロープが15から0に到達するまでの秒数を計算

    Args:
        volume: 分周器のリロード値V (0-15)
        quarter_frame_rate: クォーターフレームの周波数 (Hz)

    Returns:
        減衰時間 (秒)
    """
    if not (0 <= volume <= MAX_ENVELOPE_PERIOD):
        raise InvalidValueError(f"Envelope period {volume} out of range [0, {MAX_ENVELOPE_PERIOD}]")

    if quarter_frame_rate <= 0:
        raise InvalidValueError(f"Quarter frame rate must be positive, got {quarter_frame_rate}")

    return MAX_VOLUME_LEVEL * (volume + 1) / quarter_frame_rate


def generate_envelope_volumes(register_value: int, ticks: int) -> List[int]:
    """スタート直後からの音量推移をリストで取得"""
    return create_envelope_generator(register_value, start=True).generate_volume_sequence(ticks).tolist()
