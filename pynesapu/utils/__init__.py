"""
pynesapu ユーティリティ層

このモジュールは、パルスコアで使用される
ユーティリティクラスと関数を提供します。
"""

from .state_manager import (
    # 状態管理クラス
    StateManager,
    StateSnapshot,
    StatePatch,
    StateManagerError,

    # ファクトリ関数
    create_state_manager,
    create_quick_patch,
    format_register_key,
    parse_register_key,
)

# パブリックAPI
__all__ = [
    "StateManager",
    "StateSnapshot",
    "StatePatch",
    "StateManagerError",
    "create_state_manager",
    "create_quick_patch",
    "format_register_key",
    "parse_register_key",
]
