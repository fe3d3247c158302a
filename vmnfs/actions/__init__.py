"""Provisioning pipeline actions."""

from __future__ import annotations

from .prepare_nfs_settings import (
    NFSSettings,
    PrepareNFSSettings,
    find_host_only_adapter,
    find_host_only_interface,
    read_machine_ip,
    resolve_nfs_settings,
    using_nfs,
)

__all__ = [
    'NFSSettings',
    'PrepareNFSSettings',
    'find_host_only_adapter',
    'find_host_only_interface',
    'read_machine_ip',
    'resolve_nfs_settings',
    'using_nfs',
]
