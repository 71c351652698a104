"""
Core types for the vtiger web service.

These dataclasses provide type safety and IDE support for configuration,
sessions and the response envelope.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Configuration
# =============================================================================


DEFAULT_TIMEOUT = 60
WEBSERVICE_PATH = "/webservice.php"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for a vtiger instance."""

    base_url: str = ""
    username: str = ""
    access_key: str = field(default="", repr=False)
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        # Frozen, so normalise through object.__setattr__
        object.__setattr__(self, "base_url", (self.base_url or "").rstrip("/"))

    @property
    def webservice_url(self) -> str:
        """Full URL of the single web service endpoint."""
        return f"{self.base_url}{WEBSERVICE_PATH}"

    @classmethod
    def from_env(
        cls,
        base_url: str | None = None,
        username: str | None = None,
        access_key: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> "ClientConfig":
        """
        Build a config, filling missing values from the environment.

        Args:
            base_url: vtiger URL (or VTIGER_URL env var)
            username: vtiger username (or VTIGER_USERNAME env var)
            access_key: User access key from the preferences page (or VTIGER_ACCESS_KEY env var)
            timeout: Request timeout in seconds

        """
        return cls(
            base_url=base_url or os.environ.get("VTIGER_URL", ""),
            username=username or os.environ.get("VTIGER_USERNAME", ""),
            access_key=access_key or os.environ.get("VTIGER_ACCESS_KEY", ""),
            timeout=timeout,
        )


# =============================================================================
# Session Types
# =============================================================================


@dataclass(frozen=True)
class Session:
    """An authenticated web service session."""

    session_id: str
    user_id: str | None = None
    user: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        """Create from the `result` of a login response."""
        return cls(
            session_id=data["sessionName"],
            user_id=data.get("userId"),
            user=data,
        )


# =============================================================================
# Module Types
# =============================================================================


class VtigerModule(str, Enum):
    """Logical module keys understood by the client."""

    CALENDAR = "calendar"
    LEADS = "leads"
    ACCOUNTS = "accounts"
    CONTACTS = "contacts"
    POTENTIALS = "potentials"
    PRODUCTS = "products"
    DOCUMENTS = "documents"
    EMAILS = "emails"
    HELPDESK = "helpdesk"
    FAQ = "faq"
    VENDORS = "vendors"
    PRICEBOOKS = "pricebooks"
    QUOTES = "quotes"
    PURCHASEORDER = "purchaseorder"
    SALESORDER = "salesorder"
    INVOICE = "invoice"
    CAMPAIGNS = "campaigns"
    EVENTS = "events"
    USERS = "users"
    GROUPS = "groups"
    CURRENCY = "currency"
    DOCUMENTFOLDERS = "documentfolders"


@dataclass(frozen=True)
class ModuleInfo:
    """A row of the module table."""

    key: VtigerModule
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        return {"key": self.key.value, "id": self.id, "name": self.name}


# =============================================================================
# Response Envelope
# =============================================================================


@dataclass
class ErrorInfo:
    """Error block of a failed response."""

    message: str | None = None
    code: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "ErrorInfo":
        """Create from API response dict."""
        if not isinstance(data, dict):
            return cls()
        return cls(message=data.get("message"), code=data.get("code"))


@dataclass
class VtigerResponse:
    """The `{success, result, error}` envelope every operation returns."""

    success: bool
    result: Any = None
    error: ErrorInfo | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VtigerResponse":
        """Create from API response dict."""
        error = data.get("error")
        return cls(
            success=bool(data.get("success")),
            result=data.get("result"),
            error=ErrorInfo.from_dict(error) if error is not None else None,
        )
