from __future__ import annotations

from pathlib import Path

import scriptconfig as scfg
from loguru import logger

from ..config import MachineConfig, load
from ..driver import load_snapshot
from ..machine import Machine

log = logger


class _BaseCommand(scfg.DataConfig):
    """Base options shared by all commands."""

    config = scfg.Value(
        None, help='Path to machine config TOML (default: .vmnfs.toml).'
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )


def _cfg_path(p: str | None) -> Path:
    return Path(p or '.vmnfs.toml').resolve()


def _snapshot_path(p: str | None) -> Path | None:
    return Path(p).expanduser().resolve() if p else None


def _load_cfg(config_path: str | None) -> MachineConfig:
    cfg, _ = _load_cfg_with_path(config_path)
    return cfg


def _load_cfg_with_path(config_path: str | None) -> tuple[MachineConfig, Path]:
    path = _cfg_path(config_path)
    if not path.exists():
        raise FileNotFoundError(
            f'Config not found: {path}. '
            f'Run: vmnfs config init --config {path}'
        )
    cfg = load(path).expanded_paths()
    log.debug('Loaded machine config {} (vm={})', path, cfg.vm.name)
    return cfg, path


def _load_machine(config_path: str | None, snapshot: str | None) -> Machine:
    cfg = _load_cfg(config_path)
    driver = load_snapshot(_snapshot_path(snapshot))
    return Machine.from_config(cfg, driver)


__all__ = [name for name in globals() if not name.startswith('__')]
