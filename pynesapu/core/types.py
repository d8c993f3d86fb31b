"""
NES APU パルスチャンネル変調コア - 基本型定義とエラークラス

このモジュールは、パルスチャンネル変調コアの基本的な型定義、
データクラス、およびエラークラスを提供します。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any
from abc import ABC, abstractmethod


# =============================================================================
# エラークラス定義
# =============================================================================

class APUError(Exception):
    """APUエミュレータ基本例外"""
    pass


class RegisterAccessError(APUError):
    """レジスタアクセスエラー

    無効なチャンネル番号またはレジスタ番号へのアクセス時に発生
    """
    pass


class InvalidValueError(APUError):
    """無効な値エラー

    レジスタや設定に無効な値を設定しようとした時に発生
    """
    pass


# =============================================================================
# 列挙型
# =============================================================================

class NegatePolarity(Enum):
    """スイープ加算器の負数表現

    パルス1は1の補数、パルス2は2の補数で変化量を負にする。
    2つのパルスチャンネルの唯一の構造的な違い。
    """
    ONES_COMPLEMENT = "ones"
    TWOS_COMPLEMENT = "twos"


def polarity_for_channel(channel: int) -> NegatePolarity:
    """チャンネル番号から負数表現を決定

    Args:
        channel: パルスチャンネル番号 (0または1)

    Returns:
        チャンネル0は1の補数、チャンネル1は2の補数

    Raises:
        RegisterAccessError: チャンネル番号が無効な場合
    """
    if channel == 0:
        return NegatePolarity.ONES_COMPLEMENT
    if channel == 1:
        return NegatePolarity.TWOS_COMPLEMENT
    raise RegisterAccessError(f"Pulse channel {channel} out of range [0, {NUM_PULSE_CHANNELS - 1}]")


# =============================================================================
# 状態管理データクラス
# =============================================================================

@dataclass
class PulseChannelState:
    """パルスチャンネル内部状態

    1チャンネル分のレジスタラッチと周期を表現するデータクラス。
    状態保存・復元、デバッグ、テストに使用される。

    Attributes:
        registers: 4個のレジスタラッチ値 (0-255)
        period: タイマー周期 (11ビット)
        duty: デューティ比 (0-3)
        length_index: 長さカウンタのロードインデックス (0-31)
    """
    registers: List[int] = field(default_factory=lambda: [0] * NUM_PULSE_REGISTERS)
    period: int = 0
    duty: int = 0
    length_index: int = 0

    def __post_init__(self):
        """初期化後の検証"""
        # レジスタ数・値の範囲チェック
        if len(self.registers) != NUM_PULSE_REGISTERS:
            raise InvalidValueError(f"Expected {NUM_PULSE_REGISTERS} registers, got {len(self.registers)}")

        for i, reg_val in enumerate(self.registers):
            if not (0 <= reg_val <= 255):
                raise InvalidValueError(f"Register {i} value {reg_val} out of range [0, 255]")

        if not (0 <= self.period <= MAX_TIMER_PERIOD):
            raise InvalidValueError(f"Timer period {self.period} out of range [0, {MAX_TIMER_PERIOD}]")

        if not (0 <= self.duty <= 3):
            raise InvalidValueError(f"Duty {self.duty} out of range [0, 3]")

        if not (0 <= self.length_index <= 31):
            raise InvalidValueError(f"Length index {self.length_index} out of range [0, 31]")

    def copy(self) -> 'PulseChannelState':
        """状態の深いコピーを作成"""
        return PulseChannelState(
            registers=self.registers.copy(),
            period=self.period,
            duty=self.duty,
            length_index=self.length_index
        )

    def to_dict(self) -> Dict[str, Any]:
        """辞書形式にシリアライズ"""
        return {
            'registers': self.registers.copy(),
            'period': self.period,
            'duty': self.duty,
            'length_index': self.length_index
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PulseChannelState':
        """辞書からデシリアライズ"""
        return cls(
            registers=list(data.get('registers', [0] * NUM_PULSE_REGISTERS)),
            period=data.get('period', 0),
            duty=data.get('duty', 0),
            length_index=data.get('length_index', 0)
        )


# =============================================================================
# 抽象基底クラス
# =============================================================================

class Device(ABC):
    """デバイス抽象基底クラス"""

    @property
    @abstractmethod
    def name(self) -> str:
        """デバイス名"""
        pass

    @abstractmethod
    def reset(self) -> None:
        """デバイスリセット"""
        pass

    @abstractmethod
    def tick(self, frame_steps: int) -> int:
        """Tick駆動実行"""
        pass


# =============================================================================
# 定数定義
# =============================================================================

# チャンネル・周期定数
NUM_PULSE_CHANNELS = 2
NUM_PULSE_REGISTERS = 4
MAX_TIMER_PERIOD = 0x7FF  # 11ビット
MIN_AUDIBLE_PERIOD = 8  # これ未満の周期は常にミュート
MAX_VOLUME_LEVEL = 15  # 4ビット
MAX_SWEEP_SHIFT = 7  # 3ビット
MAX_SWEEP_PERIOD = 7  # 3ビット
MAX_ENVELOPE_PERIOD = 15  # 4ビット

# レジスタ番号定数 (チャンネル内オフセット)
REG_PULSE_MAIN = 0  # DDLC VVVV
REG_PULSE_SWEEP = 1  # EPPP NSSS
REG_PULSE_TIMER_LO = 2  # TTTT TTTT
REG_PULSE_TIMER_HI = 3  # LLLL LTTT

# メインレジスタビット定数
MAIN_DUTY_MASK = 0xC0
MAIN_DUTY_SHIFT = 6
MAIN_LOOP_FLAG = 0x20
MAIN_CONSTANT_VOLUME = 0x10
MAIN_VOLUME_MASK = 0x0F

# スイープレジスタビット定数
SWEEP_ENABLE = 0x80
SWEEP_PERIOD_MASK = 0x70
SWEEP_PERIOD_SHIFT = 4
SWEEP_NEGATE = 0x08
SWEEP_SHIFT_MASK = 0x07

# タイマー上位レジスタビット定数
TIMER_HI_MASK = 0x07
LENGTH_INDEX_SHIFT = 3
