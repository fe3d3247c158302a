"""Driver query interface and a snapshot-backed implementation.

The preparer only needs three things from a hypervisor driver: the host-only
adapters known to the host, the interfaces attached to one machine, and a
version capability check. :class:`SnapshotDriver` serves these from a
recorded TOML snapshot so the pipeline can run without a live hypervisor.

Snapshot layout::

    version = "18.1.0"

    [[host_only_interfaces]]
    name = "vnic1"
    bound_to = "vnic1"
    ip = "10.211.55.2"

    [network_interfaces.net0]
    type = "hostonly"
    hostonly = "vnic1"
"""

from __future__ import annotations

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from .errors import ConfigError, VMNFSError
from .util import appdir
from .version import parse_version, version_satisfies

log = logger

HOSTONLY_TYPE = 'hostonly'


@dataclass(frozen=True)
class HostOnlyInterface:
    name: str
    bound_to: str = ''
    ip: str = ''


@dataclass(frozen=True)
class AttachedInterface:
    slot: str
    type: str
    hostonly: str = ''


class Driver(ABC):
    """Read-only view of hypervisor state used by provisioning actions."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Hypervisor version string, e.g. ``'18.1.0'``."""

    @abstractmethod
    def read_host_only_interfaces(self) -> list[HostOnlyInterface]:
        """All host-only adapters on the host, in host order."""

    @abstractmethod
    def read_network_interfaces(self) -> dict[str, AttachedInterface]:
        """Interfaces attached to the machine, keyed by slot in slot order."""

    def version_satisfies(self, constraint: str) -> bool:
        return version_satisfies(self.version, constraint)


@dataclass
class SnapshotDriver(Driver):
    snapshot_version: str = ''
    host_only_interfaces: list[HostOnlyInterface] = field(default_factory=list)
    network_interfaces: dict[str, AttachedInterface] = field(
        default_factory=dict
    )

    @property
    def version(self) -> str:
        return self.snapshot_version

    def read_host_only_interfaces(self) -> list[HostOnlyInterface]:
        return list(self.host_only_interfaces)

    def read_network_interfaces(self) -> dict[str, AttachedInterface]:
        return dict(self.network_interfaces)


def snapshot_path() -> Path:
    return appdir('vmnfs', 'config') / 'snapshot.toml'


def snapshot_from_dict(raw: dict) -> SnapshotDriver:
    version = str(raw.get('version', '')).strip()
    if not version:
        raise ConfigError('Driver snapshot is missing a version')
    try:
        parse_version(version)
    except VMNFSError as ex:
        raise ConfigError(f'Driver snapshot has an invalid version: {ex}') from ex
    drv = SnapshotDriver(snapshot_version=version)

    items = raw.get('host_only_interfaces', [])
    if not isinstance(items, list):
        raise ConfigError('host_only_interfaces must be an array of tables')
    for item in items:
        if not isinstance(item, dict):
            continue
        name = str(item.get('name', '')).strip()
        if not name:
            log.warning('Skipping host-only interface without a name: {}', item)
            continue
        drv.host_only_interfaces.append(
            HostOnlyInterface(
                name=name,
                bound_to=str(item.get('bound_to', '')).strip(),
                ip=str(item.get('ip', '')).strip(),
            )
        )

    slots = raw.get('network_interfaces', {})
    if not isinstance(slots, dict):
        raise ConfigError('network_interfaces must be a table keyed by slot')
    for slot, item in slots.items():
        if not isinstance(item, dict):
            continue
        drv.network_interfaces[slot] = AttachedInterface(
            slot=slot,
            type=str(item.get('type', '')).strip(),
            hostonly=str(item.get('hostonly', '')).strip(),
        )
    log.debug(
        'Loaded driver snapshot version={} adapters={} attached={}',
        drv.version,
        len(drv.host_only_interfaces),
        len(drv.network_interfaces),
    )
    return drv


def load_snapshot(path: Path | None = None) -> SnapshotDriver:
    fpath = path or snapshot_path()
    if not fpath.exists():
        raise FileNotFoundError(f'Driver snapshot not found: {fpath}')
    try:
        raw = tomllib.loads(fpath.read_text(encoding='utf-8'))
    except tomllib.TOMLDecodeError as ex:
        raise ConfigError(f'Invalid driver snapshot {fpath}: {ex}') from ex
    return snapshot_from_dict(raw)
