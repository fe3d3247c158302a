"""Execution context threaded through provisioning pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

from .machine import Machine


@dataclass
class ActionEnv:
    """State shared by every stage of one pipeline run.

    Declared fields are owned by specific stages and stay ``None`` until that
    stage populates them. ``extra`` holds values for stages without a
    declared field. Mapping-style access treats a key as present only when
    its value is set, so ``'nfs_host_ip' in env`` is False before NFS
    settings are prepared.
    """

    machine: Machine
    nfs_host_ip: str | None = None
    nfs_machine_ip: list[str] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def _declared(self) -> set[str]:
        return {f.name for f in fields(self) if f.name != 'extra'}

    def __getitem__(self, key: str) -> Any:
        if key in self._declared():
            value = getattr(self, key)
            if value is None:
                raise KeyError(key)
            return value
        return self.extra[key]

    def __setitem__(self, key: str, value: Any) -> None:
        if key in self._declared():
            setattr(self, key, value)
        else:
            self.extra[key] = value

    def __contains__(self, key: object) -> bool:
        if key in self._declared():
            return getattr(self, str(key)) is not None
        return key in self.extra

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def keys(self) -> list[str]:
        present = [k for k in sorted(self._declared()) if k in self]
        return present + list(self.extra)
