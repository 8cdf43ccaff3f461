"""Public configuration API."""

from .loader import DEFAULT_CONFIG_NAME, load_settings
from .models import (
    AppConfig,
    BackendConfig,
    ProceduresConfig,
    Settings,
    WorkflowConfig,
)

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "AppConfig",
    "BackendConfig",
    "ProceduresConfig",
    "Settings",
    "WorkflowConfig",
    "load_settings",
]
