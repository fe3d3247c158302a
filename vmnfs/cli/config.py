"""CLI commands for creating and inspecting the machine config."""

from __future__ import annotations

import sys

import scriptconfig as scfg

from ..config import default_config, dump_toml, save
from ..util import ensure_dir
from ._common import _BaseCommand, _cfg_path, _load_cfg


class InitCLI(_BaseCommand):
    """Write a starter machine config with one NFS folder."""

    force = scfg.Value(
        False, isflag=True, help='Overwrite an existing config file.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        path = _cfg_path(args.config)
        if path.exists() and not args.force:
            print(f'Config already exists: {path}', file=sys.stderr)
            print('Use --force to overwrite it.', file=sys.stderr)
            return 2
        ensure_dir(path.parent)
        save(path, default_config())
        print(f'Wrote config: {path}')
        return 0


class ConfigShowCLI(_BaseCommand):
    """Show the resolved machine config."""

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        print(dump_toml(_load_cfg(args.config)), end='')
        return 0


class ConfigModalCLI(scfg.ModalCLI):
    """Machine config management."""

    init = InitCLI
    show = ConfigShowCLI
