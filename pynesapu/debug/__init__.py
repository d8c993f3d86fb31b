"""
pynesapu - デバッグ機能

このモジュールは、パルスコアのデバッグ機能を提供します。

主要コンポーネント:
- RegisterViewer: レジスタ表示・解析
- ModulationViewer: エンベロープ音量とスイープ周期の推移表示
"""

from .register_viewer import RegisterViewer, RegisterInfo, create_register_viewer
from .modulation_viewer import (
    ModulationViewer, ModulationTrace, ModulationViewerError, create_modulation_viewer
)

__all__ = [
    'RegisterViewer', 'RegisterInfo', 'create_register_viewer',
    'ModulationViewer', 'ModulationTrace', 'ModulationViewerError', 'create_modulation_viewer'
]
