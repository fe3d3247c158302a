"""Project-specific exception types."""

from __future__ import annotations


class VMNFSError(RuntimeError):
    """Base error for domain-level vmnfs failures."""


class ConfigError(VMNFSError):
    """Raised when a machine config or driver snapshot is malformed."""


class NFSNoGuestIPError(VMNFSError):
    """Raised when no private network with a static IP is configured."""

    def __init__(self, machine_name: str = ''):
        self.machine_name = machine_name
        where = f" for machine '{machine_name}'" if machine_name else ''
        super().__init__(
            f'No guest IP was given to the private network{where}. '
            'NFS synced folders require a private network with a static IP.'
        )


class NFSNoHostonlyNetworkError(VMNFSError):
    """Raised when no usable host-only network exists for NFS."""

    def __init__(self, machine_name: str = ''):
        self.machine_name = machine_name
        where = f" of machine '{machine_name}'" if machine_name else ''
        super().__init__(
            f'NFS requires a host-only network to be attached{where}. '
            'Add a private network with a static IP and try again.'
        )
