"""Machine handle binding a VM's configuration to its driver."""

from __future__ import annotations

from dataclasses import dataclass

from .config import MachineConfig
from .driver import Driver


@dataclass
class Machine:
    name: str
    config: MachineConfig
    driver: Driver

    @classmethod
    def from_config(cls, config: MachineConfig, driver: Driver) -> 'Machine':
        return cls(name=config.vm.name, config=config, driver=driver)
