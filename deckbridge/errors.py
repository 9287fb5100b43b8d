"""Shared error types for the control-surface bridge."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProtocolError(Exception):
    """Base for per-message failures that are answered on the originating connection."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class DecodeError(ProtocolError):
    """Raised when an inbound frame is not a usable envelope (PARSE_ERROR / MISSING_ACTION)."""


@dataclass(frozen=True, slots=True)
class UnknownActionError(ProtocolError):
    action: str = ""


@dataclass(frozen=True, slots=True)
class PayloadValidationError(ProtocolError):
    """Raised by typed payload parsing when a parameter is out of range or malformed."""


@dataclass(frozen=True, slots=True)
class ActionExecutionError(ProtocolError):
    action: str = ""


@dataclass(frozen=True, slots=True)
class BindError(Exception):
    """Raised when the listening endpoint cannot be bound at server start."""

    host: str
    port: int
    reason: str

    def __str__(self) -> str:
        return f"cannot listen on {self.host}:{self.port}: {self.reason}"


@dataclass(frozen=True, slots=True)
class SurfaceConnectionError(Exception):
    """Transport failure on a single control-surface connection."""

    reason: str

    def __str__(self) -> str:
        return self.reason


__all__ = [
    "ActionExecutionError",
    "BindError",
    "DecodeError",
    "PayloadValidationError",
    "ProtocolError",
    "SurfaceConnectionError",
    "UnknownActionError",
]
