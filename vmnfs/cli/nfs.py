"""CLI commands that run and inspect NFS settings preparation."""

from __future__ import annotations

import json

import scriptconfig as scfg

from ..actions import PrepareNFSSettings, find_host_only_interface, using_nfs
from ..actions.prepare_nfs_settings import NAME_MATCH_CONSTRAINT
from ..context import ActionEnv
from ..driver import HOSTONLY_TYPE, load_snapshot
from ..pipeline import Builder
from ._common import (
    _BaseCommand,
    _cfg_path,
    _load_machine,
    _snapshot_path,
    log,
)


class ResolveCLI(_BaseCommand):
    """Resolve the NFS host IP and guest IPs for the configured machine."""

    snapshot = scfg.Value(
        None,
        help='Path to driver snapshot TOML (default: user config dir).',
    )
    as_json = scfg.Value(False, isflag=True, help='Print the result as JSON.')

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        machine = _load_machine(args.config, args.snapshot)
        env = Builder().use(PrepareNFSSettings).run(ActionEnv(machine=machine))
        if args.as_json:
            print(
                json.dumps(
                    {
                        'machine': machine.name,
                        'nfs_host_ip': env.nfs_host_ip,
                        'nfs_machine_ip': env.nfs_machine_ip,
                    },
                    indent=2,
                )
            )
            return 0
        if 'nfs_host_ip' not in env:
            print(f'NFS not in use for machine {machine.name}')
            return 0
        print(f'nfs_host_ip: {env.nfs_host_ip}')
        print(f'nfs_machine_ip: {", ".join(env.nfs_machine_ip)}')
        return 0


class InterfacesCLI(_BaseCommand):
    """List host-only adapters and the machine's attached interfaces."""

    snapshot = scfg.Value(
        None,
        help='Path to driver snapshot TOML (default: user config dir).',
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        if args.config is None and not _cfg_path(None).exists():
            machine = None
            driver = load_snapshot(_snapshot_path(args.snapshot))
        else:
            machine = _load_machine(args.config, args.snapshot)
            driver = machine.driver
        by_name = driver.version_satisfies(NAME_MATCH_CONSTRAINT)
        selected = find_host_only_interface(machine) if machine else None
        log.debug('Selected host-only adapter {}', selected)

        print(f'Driver version: {driver.version}')
        print(f'Adapter match key: {"name" if by_name else "bound_to"}')
        print('')
        print('Host-only adapters')
        adapters = driver.read_host_only_interfaces()
        # Only the first adapter equal to the selection is the one chosen.
        selected_idx = next(
            (i for i, a in enumerate(adapters) if a == selected), None
        )
        if not adapters:
            print('  (none)')
        for idx, adapter in enumerate(adapters):
            mark = ' *' if idx == selected_idx else ''
            print(
                f'  - {adapter.name} | bound_to={adapter.bound_to or "-"} '
                f'| ip={adapter.ip or "-"}{mark}'
            )
        print('')
        print('Attached interfaces')
        attached = driver.read_network_interfaces()
        if not attached:
            print('  (none)')
        for slot, iface in attached.items():
            extra = (
                f' | hostonly={iface.hostonly}'
                if iface.type == HOSTONLY_TYPE
                else ''
            )
            print(f'  - {slot} | type={iface.type or "-"}{extra}')
        if machine is not None:
            print('')
            print(f'NFS in use: {"yes" if using_nfs(machine) else "no"}')
        return 0
