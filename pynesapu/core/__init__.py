"""
NES APU パルスチャンネル変調コア - コア層

このモジュールは、変調コアの基本機能を提供します。
基本型定義、設定クラス、分周器、スイープユニット、エンベロープジェネレータ、
およびパルスチャンネル/コアエミュレータを含みます。
"""

from .types import (
    # エラークラス
    APUError,
    RegisterAccessError,
    InvalidValueError,

    # 列挙型
    NegatePolarity,
    polarity_for_channel,

    # 状態クラス
    PulseChannelState,

    # 抽象基底クラス
    Device,

    # 定数
    NUM_PULSE_CHANNELS,
    NUM_PULSE_REGISTERS,
    MAX_TIMER_PERIOD,
    MIN_AUDIBLE_PERIOD,
    MAX_VOLUME_LEVEL,
    MAX_SWEEP_SHIFT,
    MAX_SWEEP_PERIOD,
    MAX_ENVELOPE_PERIOD,

    # レジスタ番号定数
    REG_PULSE_MAIN,
    REG_PULSE_SWEEP,
    REG_PULSE_TIMER_LO,
    REG_PULSE_TIMER_HI,
)

from .device_config import (
    # 設定クラス
    APUConfig,

    # プリセット設定関数
    create_default_config,
    create_debug_config,
    create_ntsc_config,
    create_pal_config,
)

from .divider import (
    Divider,
    create_divider,
)

from .sweep_unit import (
    # スイープユニットクラス
    SweepUnit,
    SweepClockResult,
    SweepSettings,

    # 目標周期計算
    calculate_change_amount,
    calculate_target_period,
    calculate_target_periods,
    is_period_muted,

    # ユーティリティ関数
    create_sweep_unit,
    decode_sweep_register,
)

from .envelope_generator import (
    # エンベロープジェネレータクラス
    EnvelopeGenerator,
    EnvelopeSettings,

    # ユーティリティ関数
    create_envelope_generator,
    decode_envelope_register,
    calculate_decay_duration,
    generate_envelope_volumes,
)

from .pulse_channel import (
    PulseChannel,
    create_pulse_channel,
)

from .pulse_core import (
    # コアエミュレータクラス
    PulseCore,

    # ファクトリ関数
    create_pulse_core,
    create_debug_core,
)

# パブリックAPI
__all__ = [
    # エラークラス
    "APUError",
    "RegisterAccessError",
    "InvalidValueError",

    # 列挙型
    "NegatePolarity",
    "polarity_for_channel",

    # 状態クラス
    "PulseChannelState",

    # 設定クラス
    "APUConfig",

    # 抽象基底クラス
    "Device",

    # コンポーネントクラス
    "Divider",
    "SweepUnit",
    "SweepClockResult",
    "SweepSettings",
    "EnvelopeGenerator",
    "EnvelopeSettings",
    "PulseChannel",
    "PulseCore",

    # 定数
    "NUM_PULSE_CHANNELS",
    "NUM_PULSE_REGISTERS",
    "MAX_TIMER_PERIOD",
    "MIN_AUDIBLE_PERIOD",
    "MAX_VOLUME_LEVEL",
    "MAX_SWEEP_SHIFT",
    "MAX_SWEEP_PERIOD",
    "MAX_ENVELOPE_PERIOD",
    "REG_PULSE_MAIN",
    "REG_PULSE_SWEEP",
    "REG_PULSE_TIMER_LO",
    "REG_PULSE_TIMER_HI",

    # プリセット設定関数
    "create_default_config",
    "create_debug_config",
    "create_ntsc_config",
    "create_pal_config",

    # 目標周期計算
    "calculate_change_amount",
    "calculate_target_period",
    "calculate_target_periods",
    "is_period_muted",

    # ファクトリ・ユーティリティ関数
    "create_divider",
    "create_sweep_unit",
    "decode_sweep_register",
    "create_envelope_generator",
    "decode_envelope_register",
    "calculate_decay_duration",
    "generate_envelope_volumes",
    "create_pulse_channel",
    "create_pulse_core",
    "create_debug_core",
]
