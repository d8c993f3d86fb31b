"""
状態スナップショット管理モジュール

パルスコアの状態をスナップショットとして保存・復元し、
レジスタ書き込み列を「パッチ」として適用します。どちらもJSONファイルに書き出せます。
"""

import json
from dataclasses import dataclass, field
from typing import Dict, Any, Iterator, Tuple
from datetime import datetime
from pathlib import Path
from ..core.types import APUError, NUM_PULSE_CHANNELS, NUM_PULSE_REGISTERS
from ..core.pulse_core import PulseCore


class StateManagerError(APUError):
    """状態管理関連のエラー"""
    pass


def format_register_key(channel: int, index: int) -> str:
    """(チャンネル, レジスタ番号) をパッチ用キー "channel:index" に変換"""
    return f"{channel}:{index}"


def parse_register_key(key: str) -> Tuple[int, int]:
    """パッチ用キー "channel:index" を (チャンネル, レジスタ番号) に変換

    Raises:
        StateManagerError: キーの形式が無効な場合
    """
    try:
        channel_text, index_text = key.split(':')
        return int(channel_text), int(index_text)
    except ValueError as e:
        raise StateManagerError(f"Invalid register key: {key!r}") from e


def _timestamp() -> str:
    return datetime.now().isoformat()


@dataclass
class StateSnapshot:
    """PulseCore.get_state() の名前付きコピー"""
    name: str
    state: Dict[str, Any]
    description: str = ""
    device_name: str = ""
    created_at: str = field(default_factory=_timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'state': self.state,
            'description': self.description,
            'device_name': self.device_name,
            'created_at': self.created_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StateSnapshot':
        return cls(
            name=data['name'],
            state=data['state'],
            description=data.get('description', ''),
            device_name=data.get('device_name', ''),
            created_at=data.get('created_at', _timestamp())
        )


@dataclass
class StatePatch:
    """レジスタパッチ

    キーは "channel:index" 形式、値は書き込むバイト。辞書の順序で書き込まれる。
    """
    name: str
    register_changes: Dict[str, int]
    description: str = ""
    created_at: str = field(default_factory=_timestamp)

    def iter_writes(self) -> Iterator[Tuple[int, int, int]]:
        """(チャンネル, レジスタ番号, 値) を書き込み順に列挙"""
        for key, value in self.register_changes.items():
            channel, index = parse_register_key(key)
            yield channel, index, value

    def validate(self) -> None:
        """全キー・値の範囲を検証

        Raises:
            StateManagerError: 無効なキーまたは値を含む場合
        """
        for channel, index, value in self.iter_writes():
            if not (0 <= channel < NUM_PULSE_CHANNELS) or not (0 <= index < NUM_PULSE_REGISTERS):
                raise StateManagerError(f"Invalid register key in patch '{self.name}': {channel}:{index}")
            if not (0 <= value <= 255):
                raise StateManagerError(f"Invalid register value in patch '{self.name}': {value}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'register_changes': self.register_changes,
            'description': self.description,
            'created_at': self.created_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StatePatch':
        return cls(
            name=data['name'],
            register_changes=dict(data['register_changes']),
            description=data.get('description', ''),
            created_at=data.get('created_at', _timestamp())
        )


class StateManager:
    """スナップショットとパッチを名前で管理し、base_directory配下のJSONへ入出力する"""

    def __init__(self, base_directory: str = "states"):
        self.base_directory = Path(base_directory)
        self.base_directory.mkdir(parents=True, exist_ok=True)

        self._snapshots: Dict[str, StateSnapshot] = {}
        self._patches: Dict[str, StatePatch] = {}

    # =========================================================================
    # スナップショット
    # =========================================================================

    def create_snapshot(self, device: PulseCore, name: str, description: str = "") -> StateSnapshot:
        """デバイス状態のスナップショットを作成

        Raises:
            StateManagerError: 状態の取得に失敗した場合
        """
        try:
            state = device.get_state()
        except APUError as e:
            raise StateManagerError(f"Failed to create snapshot '{name}': {e}") from e

        snapshot = StateSnapshot(name, state, description, device.name)
        self._snapshots[name] = snapshot
        return snapshot

    def get_snapshot(self, name: str) -> StateSnapshot:
        if name not in self._snapshots:
            raise StateManagerError(f"Snapshot '{name}' not found")
        return self._snapshots[name]

    def restore_snapshot(self, device: PulseCore, name: str) -> None:
        """スナップショットをデバイスに復元

        復元に失敗した場合、デバイスの状態は変更されない。

        Raises:
            StateManagerError: 復元に失敗した場合
        """
        snapshot = self.get_snapshot(name)
        try:
            device.set_state(snapshot.state)
        except APUError as e:
            raise StateManagerError(f"Failed to restore snapshot '{name}': {e}") from e

    # =========================================================================
    # パッチ
    # =========================================================================

    def create_patch(self, name: str, register_changes: Dict[str, int], description: str = "") -> StatePatch:
        """レジスタ変更パッチを作成

        Raises:
            StateManagerError: パッチ内容が無効な場合
        """
        patch = StatePatch(name, dict(register_changes), description)
        patch.validate()
        self._patches[name] = patch
        return patch

    def get_patch(self, name: str) -> StatePatch:
        if name not in self._patches:
            raise StateManagerError(f"Patch '{name}' not found")
        return self._patches[name]

    def apply_patch(self, device: PulseCore, name: str) -> None:
        """パッチの書き込みをデバイスに順に適用

        Raises:
            StateManagerError: 書き込みに失敗した場合
        """
        try:
            for channel, index, value in self.get_patch(name).iter_writes():
                device.write_register(channel, index, value)
        except StateManagerError:
            raise
        except APUError as e:
            raise StateManagerError(f"Failed to apply patch '{name}': {e}") from e

    # =========================================================================
    # ファイル入出力
    # =========================================================================

    def _write_json(self, kind: str, filename: str, data: Dict[str, Any]) -> str:
        filepath = self.base_directory / filename
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump({'type': kind, 'data': data}, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StateManagerError(f"Failed to save to '{filepath}': {e}") from e
        return str(filepath)

    def _read_json(self, kind: str, filepath: str) -> Dict[str, Any]:
        filepath = Path(filepath)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError as e:
            raise StateManagerError(f"File not found: {filepath}") from e
        except json.JSONDecodeError as e:
            raise StateManagerError(f"Invalid JSON in file '{filepath}': {e}") from e
        except OSError as e:
            raise StateManagerError(f"Failed to load from '{filepath}': {e}") from e

        if not isinstance(document, dict) or document.get('type') != kind:
            raise StateManagerError(f"'{filepath}' is not a {kind} file")
        return document['data']

    @staticmethod
    def _default_filename(prefix: str, name: str) -> str:
        return f"{prefix}{name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

    def save_snapshot_to_file(self, snapshot_name: str, filename: str = None) -> str:
        """スナップショットをファイルに保存

        Returns:
            保存されたファイルパス
        """
        snapshot = self.get_snapshot(snapshot_name)
        filename = filename or self._default_filename('', snapshot_name)
        return self._write_json('snapshot', filename, snapshot.to_dict())

    def load_snapshot_from_file(self, filepath: str) -> str:
        """ファイルからスナップショットを読み込み、その名前を返す"""
        snapshot = StateSnapshot.from_dict(self._read_json('snapshot', filepath))
        self._snapshots[snapshot.name] = snapshot
        return snapshot.name

    def save_patch_to_file(self, patch_name: str, filename: str = None) -> str:
        patch = self.get_patch(patch_name)
        filename = filename or self._default_filename('patch_', patch_name)
        return self._write_json('patch', filename, patch.to_dict())

    def load_patch_from_file(self, filepath: str) -> str:
        """ファイルからパッチを読み込み、その名前を返す

        Raises:
            StateManagerError: 読み込みに失敗した場合、またはパッチ内容が無効な場合
        """
        patch = StatePatch.from_dict(self._read_json('patch', filepath))
        patch.validate()
        self._patches[patch.name] = patch
        return patch.name


# =============================================================================
# ファクトリ関数
# =============================================================================

def create_state_manager(base_directory: str = "states") -> StateManager:
    return StateManager(base_directory)


def create_quick_patch(name: str, channel: int, index: int, value: int, description: str = "") -> StatePatch:
    """単一レジスタ変更の簡易パッチを作成"""
    return StatePatch(name, {format_register_key(channel, index): value}, description)
