"""
vtiger CLI - Three-layer client for the vtiger CRM web service.

Layers:
- core: Raw types, module table and HTTP client
- sdk: High-level VtigerClient with session handling
- cli: Opinionated command-line interface
"""

from vtiger_cli.core.types import VtigerModule
from vtiger_cli.sdk import VtigerClient

__version__ = "0.1.0"
__all__ = ["VtigerClient", "VtigerModule"]
