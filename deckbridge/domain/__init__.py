"""Interfaces to the host application's domain layer."""

from __future__ import annotations

from .protocol import DomainCommands
from .queue import CommandQueue, DomainCommand

__all__ = ["CommandQueue", "DomainCommand", "DomainCommands"]
