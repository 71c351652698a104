"""
Core layer - Raw types, module table and HTTP client.

This layer provides:
- Typed dataclasses for config, sessions and the response envelope
- The static module key -> (id, name) table
- Low-level HTTP client with envelope and error handling
"""

from vtiger_cli.core.client import (
    APIClient,
    ChallengeError,
    RemoteOperationError,
    TransportError,
    UnknownModuleError,
    ValidationError,
    VtigerError,
)
from vtiger_cli.core.modules import (
    MODULES,
    all_modules,
    module_id,
    module_info,
    module_name,
    record_ref,
)
from vtiger_cli.core.types import (
    ClientConfig,
    ErrorInfo,
    ModuleInfo,
    Session,
    VtigerModule,
    VtigerResponse,
)

__all__ = [
    "APIClient",
    "ChallengeError",
    "ClientConfig",
    "ErrorInfo",
    "MODULES",
    "ModuleInfo",
    "RemoteOperationError",
    "Session",
    "TransportError",
    "UnknownModuleError",
    "ValidationError",
    "VtigerError",
    "VtigerModule",
    "VtigerResponse",
    "all_modules",
    "module_id",
    "module_info",
    "module_name",
    "record_ref",
]
