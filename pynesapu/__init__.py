"""
PyNESAPU - NES APU パルスチャンネル変調コア

NES (2A03) APUのパルスチャンネルが持つスイープユニットとエンベロープ
ジェネレータ、およびそれらが共有する分周器のPython実装です。

主な機能:
- 1の補数 / 2の補数で異なるスイープの目標周期計算とミュート判定
- ハーフフレームで動作するスイープの周期更新
- クォーターフレームで動作するエンベロープの減衰・ループ・固定音量
- レジスタ書き込み (DDLC VVVV / EPPP NSSS / タイマー) のデコード
- 状態保存・復元
- レジスタ表示・変調推移のグラフ出力

使用例:
    >>> from pynesapu import create_emulator
    >>> core = create_emulator()
    >>> core.write_register(1, 1, 0x81)  # パルス2: スイープ有効, 分周0, シフト1
    >>> core.get_channel(1).set_period(100)
    >>> core.half_frame_tick()[1].new_period
    150
"""

# バージョン情報
__version__ = "1.0.0"
__author__ = "PyNESAPU Development Team"
__license__ = "MIT"
__description__ = "NES APU pulse channel modulation core - sweep unit, envelope generator and divider"

# コア機能のインポート
from .core import (
    # エラークラス
    APUError,
    RegisterAccessError,
    InvalidValueError,

    # 列挙型
    NegatePolarity,

    # 状態・設定クラス
    PulseChannelState,
    APUConfig,

    # 抽象基底クラス
    Device,

    # コンポーネントクラス
    Divider,
    SweepUnit,
    SweepClockResult,
    EnvelopeGenerator,
    PulseChannel,

    # コアエミュレータクラス
    PulseCore,

    # プリセット設定関数
    create_default_config,
    create_debug_config,
    create_ntsc_config,
    create_pal_config,

    # ファクトリ関数
    create_divider,
    create_sweep_unit,
    create_envelope_generator,
    create_pulse_channel,
    create_pulse_core,
    create_debug_core,

    # 重要な定数
    NUM_PULSE_CHANNELS,
    NUM_PULSE_REGISTERS,
    REG_PULSE_MAIN,
    REG_PULSE_SWEEP,
    REG_PULSE_TIMER_LO,
    REG_PULSE_TIMER_HI,
)

# ユーティリティ機能のインポート
from .utils import (
    StateManager,
    StateManagerError,
    create_state_manager,
)

# パブリックAPI定義
__all__ = [
    # バージョン情報
    "__version__",
    "__author__",
    "__license__",
    "__description__",

    # エラークラス
    "APUError",
    "RegisterAccessError",
    "InvalidValueError",
    "StateManagerError",

    # 列挙型
    "NegatePolarity",

    # 状態・設定クラス
    "PulseChannelState",
    "APUConfig",

    # 抽象基底クラス
    "Device",

    # コンポーネントクラス
    "Divider",
    "SweepUnit",
    "SweepClockResult",
    "EnvelopeGenerator",
    "PulseChannel",
    "PulseCore",
    "StateManager",

    # プリセット設定関数
    "create_default_config",
    "create_debug_config",
    "create_ntsc_config",
    "create_pal_config",

    # ファクトリ関数
    "create_divider",
    "create_sweep_unit",
    "create_envelope_generator",
    "create_pulse_channel",
    "create_pulse_core",
    "create_debug_core",
    "create_state_manager",
    "create_emulator",
    "get_version_info",

    # 重要な定数
    "NUM_PULSE_CHANNELS",
    "NUM_PULSE_REGISTERS",
    "REG_PULSE_MAIN",
    "REG_PULSE_SWEEP",
    "REG_PULSE_TIMER_LO",
    "REG_PULSE_TIMER_HI",
]


def get_version_info() -> dict:
    """バージョン情報を取得

    Returns:
        バージョン情報辞書
    """
    return {
        "version": __version__,
        "author": __author__,
        "license": __license__,
        "description": __description__
    }


def create_emulator(config: APUConfig = None) -> PulseCore:
    """エミュレータインスタンスを作成

    Args:
        config: エミュレータ設定 (Noneの場合はデフォルト設定)

    Returns:
        PulseCoreインスタンス
    """
    return create_pulse_core(config)


# ライブラリ初期化時のメッセージ (デバッグモードでのみ表示)
import os
if os.environ.get('PYNESAPU_DEBUG'):
    print(f"PyNESAPU v{__version__} - NES APU Pulse Modulation Core")
    print(f"License: {__license__}")
