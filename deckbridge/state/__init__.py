from .runtime import RuntimeDeps
from .settings import AppSettings
from .surface import ControlSurfaceState
from .session import ReconnectMode, ReconnectSession

__all__ = ["AppSettings", "ControlSurfaceState", "ReconnectMode", "ReconnectSession", "RuntimeDeps"]
