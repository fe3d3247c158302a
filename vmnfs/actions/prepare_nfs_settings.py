"""Resolve the host/guest IP pair used to mount NFS synced folders."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from ..config import NFS_TYPE, PRIVATE_NETWORK
from ..context import ActionEnv
from ..driver import HOSTONLY_TYPE, HostOnlyInterface
from ..errors import NFSNoGuestIPError, NFSNoHostonlyNetworkError
from ..machine import Machine
from ..pipeline import Action

log = logger

# Drivers at or above this version identify adapters by name rather than by
# the legacy bound-to identifier.
NAME_MATCH_CONSTRAINT = '>= 10'


@dataclass(frozen=True)
class NFSSettings:
    host_ip: str
    machine_ips: list[str]


def using_nfs(machine: Machine) -> bool:
    """True if any synced folder is configured with the NFS type."""
    return any(
        opts.type == NFS_TYPE
        for opts in machine.config.vm.synced_folders.values()
    )


def find_host_only_interface(machine: Machine) -> HostOnlyInterface | None:
    """Return the first host-only adapter attached to the machine.

    Attached host-only interfaces are visited in slot order and, for each,
    the host adapters in host order; the first adapter whose identifier
    matches the interface's ``hostonly`` binding wins. The driver version is
    only consulted once there is a candidate pair to compare.
    """
    driver = machine.driver
    host_only_all = driver.read_host_only_interfaces()
    host_only_used = [
        iface
        for iface in driver.read_network_interfaces().values()
        if iface.type == HOSTONLY_TYPE
    ]
    log.debug(
        'Matching {} attached host-only interface(s) against {} adapter(s)',
        len(host_only_used),
        len(host_only_all),
    )
    match_by_name = None
    for used in host_only_used:
        for adapter in host_only_all:
            if match_by_name is None:
                match_by_name = driver.version_satisfies(NAME_MATCH_CONSTRAINT)
            key = adapter.name if match_by_name else adapter.bound_to
            if key == used.hostonly:
                log.debug(
                    'Slot {} is bound to adapter {} ip={} (matched by {})',
                    used.slot,
                    adapter.name,
                    adapter.ip,
                    'name' if match_by_name else 'bound_to',
                )
                return adapter
    return None


def find_host_only_adapter(machine: Machine) -> str | None:
    """Return the IP of the first host-only adapter attached to the machine."""
    adapter = find_host_only_interface(machine)
    return adapter.ip if adapter is not None else None


def read_machine_ip(machine: Machine) -> list[str]:
    """Return static IPs of every private network, in config order."""
    ips = [
        net.ip
        for net in machine.config.vm.networks
        if net.type == PRIVATE_NETWORK and isinstance(net.ip, str) and net.ip
    ]
    if not ips:
        raise NFSNoGuestIPError(machine.name)
    return ips


def resolve_nfs_settings(machine: Machine) -> NFSSettings:
    # Host lookup first, but a missing guest IP is reported before a missing
    # host adapter.
    host_ip = find_host_only_adapter(machine)
    machine_ips = read_machine_ip(machine)
    if not host_ip or not machine_ips:
        raise NFSNoHostonlyNetworkError(machine.name)
    return NFSSettings(host_ip=host_ip, machine_ips=machine_ips)


class PrepareNFSSettings(Action):
    """Publish ``nfs_host_ip`` and ``nfs_machine_ip`` for the mount step.

    Does its work after the rest of the chain returns. Nothing is written
    unless both values resolve.
    """

    def process(self, env: ActionEnv) -> None:
        machine = env.machine
        self.app(env)

        if using_nfs(machine):
            log.info(
                'Using NFS, preparing NFS settings by reading host IP and machine IP'
            )
            self.add_ips_to_env(env)

    def add_ips_to_env(self, env: ActionEnv) -> None:
        settings = resolve_nfs_settings(env.machine)
        env.nfs_host_ip = settings.host_ip
        env.nfs_machine_ip = list(settings.machine_ips)
        log.debug(
            'NFS settings for {}: host_ip={} machine_ip={}',
            env.machine.name,
            env.nfs_host_ip,
            env.nfs_machine_ip,
        )
