"""db3 config signing — models package."""

from .system_config import NodeSystemConfig, SystemConfig

__all__ = [
    "NodeSystemConfig",
    "SystemConfig",
]
