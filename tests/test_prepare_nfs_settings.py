"""Tests for NFS settings preparation."""

from __future__ import annotations

import pytest

from vmnfs.actions import (
    PrepareNFSSettings,
    find_host_only_adapter,
    find_host_only_interface,
    read_machine_ip,
    resolve_nfs_settings,
    using_nfs,
)
from vmnfs.config import MachineConfig, NetworkEntry, SyncedFolderConfig
from vmnfs.context import ActionEnv
from vmnfs.driver import AttachedInterface, HostOnlyInterface, SnapshotDriver
from vmnfs.errors import NFSNoGuestIPError, NFSNoHostonlyNetworkError
from vmnfs.machine import Machine
from vmnfs.pipeline import Action, Builder


def _machine(
    *,
    nfs: bool = True,
    networks: list[NetworkEntry] | None = None,
    version: str = '18.1.0',
    adapters: list[HostOnlyInterface] | None = None,
    attached: dict[str, AttachedInterface] | None = None,
) -> Machine:
    cfg = MachineConfig()
    cfg.vm.name = 'vm1'
    cfg.vm.synced_folders['root'] = SyncedFolderConfig(
        host_path='/src', guest_path='/vagrant', type='nfs' if nfs else ''
    )
    if networks is None:
        networks = [NetworkEntry(type='private_network', ip='192.168.1.50')]
    cfg.vm.networks = networks
    if adapters is None:
        adapters = [HostOnlyInterface(name='A', bound_to='vnic1', ip='10.0.0.1')]
    if attached is None:
        attached = {
            'net0': AttachedInterface(slot='net0', type='hostonly', hostonly='A')
        }
    driver = SnapshotDriver(
        snapshot_version=version,
        host_only_interfaces=adapters,
        network_interfaces=attached,
    )
    return Machine.from_config(cfg, driver)


def _run(machine: Machine) -> ActionEnv:
    return Builder().use(PrepareNFSSettings).run(ActionEnv(machine=machine))


def test_no_nfs_folder_leaves_env_untouched() -> None:
    machine = _machine(nfs=False, networks=[], adapters=[], attached={})
    env = _run(machine)
    assert 'nfs_host_ip' not in env
    assert 'nfs_machine_ip' not in env
    assert env.nfs_host_ip is None
    assert env.nfs_machine_ip is None


def test_no_synced_folders_is_not_nfs() -> None:
    machine = _machine()
    machine.config.vm.synced_folders.clear()
    assert using_nfs(machine) is False
    env = _run(machine)
    assert env.keys() == ['machine']


def test_name_match_on_new_driver() -> None:
    machine = _machine(version='10.1.2')
    assert find_host_only_adapter(machine) == '10.0.0.1'
    env = _run(machine)
    assert env['nfs_host_ip'] == '10.0.0.1'
    assert env['nfs_machine_ip'] == ['192.168.1.50']


def test_bound_to_match_on_legacy_driver() -> None:
    adapters = [HostOnlyInterface(name='Host-Only', bound_to='vnic1', ip='10.0.0.9')]
    attached = {
        'net0': AttachedInterface(slot='net0', type='hostonly', hostonly='vnic1')
    }
    legacy = _machine(version='9.0.24172', adapters=adapters, attached=attached)
    assert find_host_only_adapter(legacy) == '10.0.0.9'

    # The same binding does not match by name on a newer driver.
    modern = _machine(version='10.0.0', adapters=adapters, attached=attached)
    assert find_host_only_adapter(modern) is None


def test_first_match_wins_in_slot_then_adapter_order() -> None:
    adapters = [
        HostOnlyInterface(name='B', ip='10.0.1.1'),
        HostOnlyInterface(name='A', ip='10.0.0.1'),
        HostOnlyInterface(name='A', ip='10.0.0.2'),
    ]
    attached = {
        'net0': AttachedInterface(slot='net0', type='shared'),
        'net1': AttachedInterface(slot='net1', type='hostonly', hostonly='A'),
        'net2': AttachedInterface(slot='net2', type='hostonly', hostonly='B'),
    }
    machine = _machine(adapters=adapters, attached=attached)
    assert find_host_only_adapter(machine) == '10.0.0.1'


def test_non_hostonly_interfaces_are_ignored() -> None:
    attached = {
        'net0': AttachedInterface(slot='net0', type='bridged', hostonly='A')
    }
    machine = _machine(attached=attached)
    assert find_host_only_adapter(machine) is None


def test_read_machine_ip_collects_static_private_ips_in_order() -> None:
    networks = [
        NetworkEntry(type='forwarded_port', options={'guest': 80, 'host': 8080}),
        NetworkEntry(type='private_network', ip='192.168.1.50'),
        NetworkEntry(type='private_network', ip=None),
        NetworkEntry(type='public_network', ip='172.16.0.5'),
        NetworkEntry(type='private_network', ip='192.168.2.60'),
    ]
    machine = _machine(networks=networks)
    assert read_machine_ip(machine) == ['192.168.1.50', '192.168.2.60']


def test_single_private_network_ip() -> None:
    machine = _machine(
        networks=[NetworkEntry(type='private_network', ip='192.168.1.50')]
    )
    assert read_machine_ip(machine) == ['192.168.1.50']


def test_missing_guest_ip_raises_and_env_untouched() -> None:
    machine = _machine(networks=[NetworkEntry(type='private_network', ip=None)])
    env = ActionEnv(machine=machine)
    with pytest.raises(NFSNoGuestIPError):
        Builder().use(PrepareNFSSettings).run(env)
    assert 'nfs_host_ip' not in env
    assert 'nfs_machine_ip' not in env


def test_missing_host_adapter_raises_and_env_untouched() -> None:
    machine = _machine(adapters=[HostOnlyInterface(name='Z', ip='10.9.9.9')])
    env = ActionEnv(machine=machine)
    with pytest.raises(NFSNoHostonlyNetworkError):
        Builder().use(PrepareNFSSettings).run(env)
    assert env.nfs_host_ip is None
    assert env.nfs_machine_ip is None


def test_missing_both_reports_guest_ip_first() -> None:
    machine = _machine(networks=[], adapters=[], attached={})
    with pytest.raises(NFSNoGuestIPError):
        resolve_nfs_settings(machine)


def test_errors_are_distinct() -> None:
    assert not issubclass(NFSNoGuestIPError, NFSNoHostonlyNetworkError)
    assert not issubclass(NFSNoHostonlyNetworkError, NFSNoGuestIPError)
    assert 'vm1' in str(NFSNoGuestIPError('vm1'))


def test_repeated_runs_are_idempotent() -> None:
    machine = _machine()
    env = _run(machine)
    first = (env.nfs_host_ip, list(env.nfs_machine_ip))
    Builder().use(PrepareNFSSettings).run(env)
    assert (env.nfs_host_ip, env.nfs_machine_ip) == first
    assert resolve_nfs_settings(machine).host_ip == first[0]


def test_delegate_runs_before_resolution() -> None:
    events: list[str] = []
    machine = _machine()

    class Recorder(Action):
        def process(self, env: ActionEnv) -> None:
            events.append(f'recorder sees host_ip={env.nfs_host_ip}')
            self.app(env)

    original = machine.driver.read_host_only_interfaces

    def tracked():
        events.append('driver queried')
        return original()

    machine.driver.read_host_only_interfaces = tracked
    env = Builder().use(PrepareNFSSettings).use(Recorder).run(
        ActionEnv(machine=machine)
    )
    assert events == ['recorder sees host_ip=None', 'driver queried']
    assert env.nfs_host_ip == '10.0.0.1'


def test_later_stage_can_attach_hostonly_interface() -> None:
    machine = _machine(attached={})

    class AttachHostOnly(Action):
        def process(self, env: ActionEnv) -> None:
            env.machine.driver.network_interfaces['net0'] = AttachedInterface(
                slot='net0', type='hostonly', hostonly='A'
            )
            self.app(env)

    env = Builder().use(PrepareNFSSettings).use(AttachHostOnly).run(
        ActionEnv(machine=machine)
    )
    assert env.nfs_host_ip == '10.0.0.1'


def test_unparsable_version_not_consulted_without_attached_hostonly() -> None:
    machine = _machine(version='unknown', attached={})
    assert find_host_only_adapter(machine) is None
    with pytest.raises(NFSNoHostonlyNetworkError):
        _run(machine)


def test_empty_version_still_reports_missing_guest_ip() -> None:
    machine = _machine(version='', networks=[], adapters=[], attached={})
    env = ActionEnv(machine=machine)
    with pytest.raises(NFSNoGuestIPError):
        Builder().use(PrepareNFSSettings).run(env)
    assert 'nfs_host_ip' not in env


def test_find_host_only_interface_returns_matched_adapter() -> None:
    adapters = [
        HostOnlyInterface(name='B', ip='10.0.0.1'),
        HostOnlyInterface(name='A', ip='10.0.0.1'),
    ]
    machine = _machine(adapters=adapters)
    assert find_host_only_interface(machine) == adapters[1]
