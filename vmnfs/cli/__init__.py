"""CLI package exports for top-level command entry points."""

from __future__ import annotations

from .main import VMNFSModalCLI, main

__all__ = ['VMNFSModalCLI', 'main']
