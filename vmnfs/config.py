"""Machine configuration view: synced folders and networks loaded from TOML."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError
from .util import expand

NFS_TYPE = 'nfs'
PRIVATE_NETWORK = 'private_network'

# Values of a network ``ip`` option that request dynamic assignment.
DYNAMIC_IP_SENTINELS = frozenset({'', 'dhcp', 'auto'})


@dataclass
class SyncedFolderConfig:
    host_path: str = '.'
    guest_path: str = '/vagrant'
    type: str = ''
    disabled: bool = False
    options: dict[str, object] = field(default_factory=dict)


@dataclass
class NetworkEntry:
    type: str = PRIVATE_NETWORK
    ip: str | None = None
    options: dict[str, object] = field(default_factory=dict)


@dataclass
class VMConfig:
    name: str = 'default'
    synced_folders: dict[str, SyncedFolderConfig] = field(default_factory=dict)
    networks: list[NetworkEntry] = field(default_factory=list)


@dataclass
class MachineConfig:
    vm: VMConfig = field(default_factory=VMConfig)
    verbosity: int = 1

    def expanded_paths(self) -> 'MachineConfig':
        for folder in self.vm.synced_folders.values():
            folder.host_path = expand(folder.host_path) if folder.host_path else ''
        return self


def _normalize_ip(raw: object) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ConfigError(f'Network ip must be a string, got {raw!r}')
    ip = raw.strip()
    if ip.lower() in DYNAMIC_IP_SENTINELS:
        return None
    return ip


def _folder_from_dict(folder_id: str, body: object) -> SyncedFolderConfig:
    if not isinstance(body, dict):
        raise ConfigError(f'Synced folder {folder_id!r} must be a table')
    folder = SyncedFolderConfig()
    for k, v in body.items():
        if k == 'options':
            if not isinstance(v, dict):
                raise ConfigError(
                    f'Synced folder {folder_id!r} options must be a table'
                )
            folder.options.update(v)
        elif k in ('host_path', 'guest_path', 'type'):
            setattr(folder, k, str(v))
        elif k == 'disabled':
            folder.disabled = bool(v)
        else:
            folder.options[k] = v
    return folder


def _network_from_dict(idx: int, body: object) -> NetworkEntry:
    if not isinstance(body, dict):
        raise ConfigError(f'Network #{idx} must be a table')
    body = dict(body)
    net_type = str(body.pop('type', PRIVATE_NETWORK)).strip()
    if not net_type:
        raise ConfigError(f'Network #{idx} has an empty type')
    ip = _normalize_ip(body.pop('ip', None))
    return NetworkEntry(type=net_type, ip=ip, options=body)


def from_dict(raw: dict) -> MachineConfig:
    cfg = MachineConfig()
    vm = raw.get('vm', None)
    if isinstance(vm, dict):
        if 'name' in vm:
            cfg.vm.name = str(vm['name'])
        folders = vm.get('synced_folders', {})
        if not isinstance(folders, dict):
            raise ConfigError('vm.synced_folders must be a table')
        for folder_id, body in folders.items():
            cfg.vm.synced_folders[folder_id] = _folder_from_dict(folder_id, body)
        networks = vm.get('networks', [])
        if not isinstance(networks, list):
            raise ConfigError('vm.networks must be an array of tables')
        for idx, body in enumerate(networks):
            cfg.vm.networks.append(_network_from_dict(idx, body))
    if 'verbosity' in raw:
        try:
            cfg.verbosity = int(raw['verbosity'])
        except (TypeError, ValueError) as ex:
            raise ConfigError(
                f'verbosity must be an integer, got {raw["verbosity"]!r}'
            ) from ex
    return cfg


def _toml_escape(s: str) -> str:
    return (
        s.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\t', '\\t')
    )


def _toml_key(key: str) -> str:
    if key and all(ch.isalnum() or ch in '-_' for ch in key):
        return key
    return f'"{_toml_escape(key)}"'


def _toml_value(val: object) -> str:
    if isinstance(val, bool):
        return 'true' if val else 'false'
    if isinstance(val, (int, float)):
        # repr gives valid TOML for floats, including inf and nan.
        return repr(val)
    if isinstance(val, (list, tuple)):
        return f'[{", ".join(_toml_value(item) for item in val)}]'
    if isinstance(val, dict):
        parts = [
            f'{_toml_key(str(k))} = {_toml_value(v)}' for k, v in val.items()
        ]
        return '{' + ', '.join(parts) + '}' if parts else '{}'
    return f'"{_toml_escape(str(val))}"'


def _emit_toml_kv(lines: list[str], key: str, val: object) -> None:
    lines.append(f'{_toml_key(key)} = {_toml_value(val)}')


def dump_toml(cfg: MachineConfig) -> str:
    lines: list[str] = []
    if cfg.verbosity != 1:
        lines.append(f'verbosity = {cfg.verbosity}')
        lines.append('')
    lines.append('[vm]')
    _emit_toml_kv(lines, 'name', cfg.vm.name)
    lines.append('')
    for folder_id, folder in cfg.vm.synced_folders.items():
        lines.append(f'[vm.synced_folders.{_toml_key(folder_id)}]')
        _emit_toml_kv(lines, 'host_path', folder.host_path)
        _emit_toml_kv(lines, 'guest_path', folder.guest_path)
        if folder.type:
            _emit_toml_kv(lines, 'type', folder.type)
        if folder.disabled:
            _emit_toml_kv(lines, 'disabled', True)
        for k, v in folder.options.items():
            _emit_toml_kv(lines, k, v)
        lines.append('')
    for net in cfg.vm.networks:
        lines.append('[[vm.networks]]')
        _emit_toml_kv(lines, 'type', net.type)
        _emit_toml_kv(lines, 'ip', net.ip if net.ip is not None else 'dhcp')
        for k, v in net.options.items():
            _emit_toml_kv(lines, k, v)
        lines.append('')
    return '\n'.join(lines).rstrip() + '\n'


def load(path: Path) -> MachineConfig:
    try:
        raw = tomllib.loads(path.read_text(encoding='utf-8'))
    except tomllib.TOMLDecodeError as ex:
        raise ConfigError(f'Invalid machine config {path}: {ex}') from ex
    return from_dict(raw)


def save(path: Path, cfg: MachineConfig) -> None:
    path.write_text(dump_toml(cfg), encoding='utf-8')


def default_config() -> MachineConfig:
    """Starter config with one NFS folder and one static private network."""
    cfg = MachineConfig()
    cfg.vm.synced_folders['vagrant-root'] = SyncedFolderConfig(
        host_path='.', guest_path='/vagrant', type=NFS_TYPE
    )
    cfg.vm.networks.append(
        NetworkEntry(type=PRIVATE_NETWORK, ip='192.168.56.10')
    )
    return cfg
