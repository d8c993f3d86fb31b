"""
NES APU パルスチャンネル変調コア - 分周器

スイープユニットとエンベロープジェネレータが共有する
リロード付きダウンカウンタを実装します。
"""

from .types import InvalidValueError


class Divider:
    """リロード付きダウンカウンタ

    カウンタが0の状態でクロックされると周期値をリロードして「発火」を通知し、
    それ以外はデクリメントする。所有者は発火時の動作だけが異なるため、
    継承ではなく合成で利用する。

    Attributes:
        period: リロード値
        counter: 現在のカウンタ値 (0-period)
    """

    __slots__ = ('period', 'counter')

    def __init__(self, period: int = 0, counter: int = 0):
        self.period = period
        self.counter = counter

    def clock(self) -> bool:
        """1クロック進める

        Returns:
            カウンタが0からリロードされた場合True
        """
        if self.counter == 0:
            self.counter = self.period
            return True

        self.counter -= 1
        return False

    def force_reload(self) -> None:
        """現在値に関係なくカウンタを周期値でリロード"""
        self.counter = self.period

    def reset(self) -> None:
        """分周器をリセット"""
        self.period = 0
        self.counter = 0

    def get_state(self) -> dict:
        """現在の状態を辞書として取得"""
        return {'period': self.period, 'counter': self.counter}

    def set_state(self, state: dict, max_counter: int = None) -> None:
        """状態を辞書から復元

        Args:
            state: 状態辞書
            max_counter: カウンタの上限 (Noneの場合は周期値)。
                所有者がレジスタ書き込みで周期だけを下げた直後は
                カウンタが周期を上回るため、所有者はフィールド幅の最大値を渡す。

        Raises:
            InvalidValueError: 状態が無効な場合
        """
        if 'period' not in state or 'counter' not in state:
            raise InvalidValueError("Divider state must contain keys: {'period', 'counter'}")

        period = state['period']
        counter = state['counter']
        if period < 0 or counter < 0:
            raise InvalidValueError(f"Invalid divider state: period={period}, counter={counter}")

        limit = period if max_counter is None else max_counter
        if counter > limit:
            raise InvalidValueError(f"Divider counter {counter} exceeds {limit} (period={period})")

        self.period = period
        self.counter = counter

    def copy(self) -> 'Divider':
        return Divider(self.period, self.counter)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Divider):
            return False
        return self.period == other.period and self.counter == other.counter

    def __repr__(self) -> str:
        return f"Divider(period={self.period}, counter={self.counter})"


def create_divider(period: int) -> Divider:
    """カウンタを周期値で満たした分周器を作成

    Args:
        period: リロード値 (0以上)

    Returns:
        Dividerインスタンス

    Raises:
        InvalidValueError: 周期が負の場合
    """
    if period < 0:
        raise InvalidValueError(f"Divider period must be non-negative, got {period}")

    return Divider(period, period)
