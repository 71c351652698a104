"""
Core HTTP client for the vtiger web service.

Handles request encoding, the response envelope, and error handling.
"""

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from vtiger_cli.core.types import ClientConfig, VtigerResponse

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class VtigerError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class TransportError(VtigerError):
    """Network, HTTP or decoding failure."""

    def __init__(self, message: str, status: int = 0, details: dict | None = None):
        super().__init__(message, details)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class RemoteOperationError(VtigerError):
    """The web service answered with `success: false`."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.code = code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.code:
            result["code"] = self.code
        return result


class ChallengeError(RemoteOperationError):
    """The challenge step of login was rejected."""


class ValidationError(VtigerError):
    """Validation error for local input/data issues (not API errors)."""


class UnknownModuleError(ValidationError):
    """A module key outside the module table."""

    def __init__(self, key: Any):
        super().__init__(f"Unknown module: {key!r}", details={"module": str(key)})
        self.key = key


class APIClient:
    """
    Low-level HTTP client for the vtiger web service.

    Handles:
    - GET requests with query parameters (reads)
    - POST requests with form-encoded bodies (writes)
    - Response envelope checking and error mapping
    """

    def __init__(self, config: ClientConfig):
        """
        Initialize the API client.

        Args:
            config: Connection settings

        """
        self.config = config

    @property
    def webservice_url(self) -> str:
        """The web service endpoint."""
        return self.config.webservice_url

    def _ensure_base_url(self) -> str:
        """Ensure the vtiger URL is configured."""
        if not self.config.base_url:
            raise ValidationError("VTIGER_URL environment variable not set")
        return self.config.webservice_url

    @staticmethod
    def _encode(params: dict[str, Any]) -> str:
        """URL-encode params, dropping None values."""
        return urllib.parse.urlencode({k: v for k, v in params.items() if v is not None})

    def _make_request(
        self,
        method: str,
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Make an HTTP request to the web service.

        Args:
            method: HTTP method (GET or POST)
            params: Operation parameters, sent as query string or form body

        Returns:
            Parsed JSON response

        Raises:
            TransportError: On HTTP or parsing errors
            RemoteOperationError: When the envelope reports failure

        """
        url = self._ensure_base_url()
        operation = params.get("operation", "")
        encoded = self._encode(params)
        headers = {"Accept": "application/json"}

        body = None
        if method == "GET":
            url = f"{url}?{encoded}" if encoded else url
        else:
            body = encoded.encode("utf-8")
            headers["Content-Type"] = FORM_CONTENT_TYPE

        request_timeout = self.config.timeout
        logger.debug("%s %s", method, operation)

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(req, timeout=request_timeout) as response:
                raw = response.read()

        except urllib.error.HTTPError as e:
            try:
                error_data = json.loads(e.read().decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                raise TransportError(str(e), status=e.code)
            raise TransportError(str(e), status=e.code, details=error_data)

        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}")

        except TimeoutError:
            raise TransportError(f"Request timed out after {request_timeout} seconds")

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(f"Invalid response body: {e}")

        if not isinstance(data, dict):
            raise TransportError("Invalid response: expected a JSON object")

        return self._check_envelope(operation, data)

    @staticmethod
    def _check_envelope(operation: str, data: dict[str, Any]) -> dict[str, Any]:
        """Raise RemoteOperationError for `success: false`, else pass data through."""
        envelope = VtigerResponse.from_dict(data)
        if envelope.success:
            return data

        error = envelope.error
        message = (error.message if error else None) or f"Operation failed: {operation}"
        raise RemoteOperationError(message, code=error.code if error else None, details=data)

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, params: dict[str, Any]) -> dict[str, Any]:
        """Make a GET request with query parameters."""
        return self._make_request("GET", params)

    def post(self, data: dict[str, Any]) -> dict[str, Any]:
        """Make a POST request with a form-encoded body."""
        return self._make_request("POST", data)
