"""
vtiger SDK - High-level client with session handling.

This layer owns the login handshake and the session token, and exposes one
method per web service operation. Built on top of the core APIClient.
"""

import hashlib
import json
import logging
from typing import Any

from vtiger_cli.core.client import APIClient, ChallengeError, RemoteOperationError, ValidationError
from vtiger_cli.core.modules import record_ref, require_module_name
from vtiger_cli.core.types import DEFAULT_TIMEOUT, ClientConfig, Session

logger = logging.getLogger(__name__)


class VtigerClient:
    """
    High-level vtiger web service client.

    Example:
        client = VtigerClient("https://crm.example.com", "admin", "accesskey")
        client.login()

        client.create("leads", {"lastname": "Doe", "company": "Acme"})
        lead = client.retrieve("leads", 42)
        rows = client.query("SELECT * FROM Leads LIMIT 10;")

        client.logout()

    Operations called before login() go out without a sessionName and are
    rejected by the server as a RemoteOperationError.

    """

    def __init__(
        self,
        url: str | None = None,
        username: str | None = None,
        access_key: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        config: ClientConfig | None = None,
    ):
        """
        Initialize the vtiger client.

        Args:
            url: vtiger URL (or VTIGER_URL env var)
            username: vtiger username (or VTIGER_USERNAME env var)
            access_key: User access key (or VTIGER_ACCESS_KEY env var)
            timeout: Request timeout in seconds
            config: Prebuilt config, used instead of the other arguments

        """
        self._config = config or ClientConfig.from_env(url, username, access_key, timeout)
        self._client = APIClient(self._config)
        self._session: Session | None = None

    # =========================================================================
    # Session
    # =========================================================================

    @property
    def config(self) -> ClientConfig:
        """Connection settings."""
        return self._config

    @property
    def webservice_url(self) -> str:
        """The web service endpoint."""
        return self._config.webservice_url

    @property
    def session(self) -> Session | None:
        """The current session, None before login."""
        return self._session

    @property
    def session_id(self) -> str | None:
        """The current session token."""
        session = self._session
        return session.session_id if session else None

    @property
    def user_id(self) -> str | None:
        """Id of the logged in user."""
        session = self._session
        return session.user_id if session else None

    @property
    def user(self) -> dict[str, Any] | None:
        """Login result describing the logged in user."""
        session = self._session
        return session.user if session else None

    def _get_challenge(self) -> dict[str, Any]:
        """Request a one-time challenge token for the configured user."""
        try:
            return self._client.get({"operation": "getchallenge", "username": self._config.username})
        except RemoteOperationError as e:
            raise ChallengeError(e.message, code=e.code, details=e.details) from e

    def login(self) -> dict[str, Any]:
        """
        Create a web service session.

        Requests a challenge token, then logs in with
        md5(token + access_key) in place of the access key.

        Returns:
            The login response, unchanged

        Raises:
            ChallengeError: If the challenge request is rejected
            RemoteOperationError: If the login is rejected
            TransportError: On network or HTTP errors

        """
        if not self._config.username or not self._config.access_key:
            raise ValidationError("VTIGER_USERNAME and VTIGER_ACCESS_KEY must be set to log in")

        challenge = self._get_challenge()
        token = (challenge.get("result") or {}).get("token")
        if not token:
            raise ChallengeError("Challenge response did not include a token", details=challenge)

        access_hash = hashlib.md5(f"{token}{self._config.access_key}".encode("utf-8")).hexdigest()

        response = self._client.post(
            {
                "operation": "login",
                "username": self._config.username,
                "accessKey": access_hash,
            }
        )

        result = response.get("result")
        if not isinstance(result, dict) or not result.get("sessionName"):
            raise RemoteOperationError("Login response did not include a session", details=response)

        self._session = Session.from_dict(result)
        logger.info("Logged in as %s", self._config.username)
        return response

    def logout(self) -> dict[str, Any]:
        """
        Destroy the current session on the server.

        The local session is kept as is; its token is no longer accepted
        by the server once this returns.

        Returns:
            The logout response, unchanged

        """
        response = self._client.post({"operation": "logout", "sessionName": self.session_id})
        logger.info("Logged out %s", self._config.username)
        return response

    # =========================================================================
    # Records
    # =========================================================================

    def create(self, module: str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Create a single record.

        All mandatory fields must be present in data; use describe() to see
        the field configuration of a module. assigned_user_id defaults to the
        logged in user.

        Args:
            module: Module key (e.g. "leads")
            data: Field values

        Returns:
            The create response, unchanged

        """
        element_type = require_module_name(module)
        session = self._session

        element = dict(data)
        element["assigned_user_id"] = element.get("assigned_user_id") or (session.user_id if session else None)

        return self._client.post(
            {
                "operation": "create",
                "sessionName": session.session_id if session else None,
                "element": json.dumps(element),
                "elementType": element_type,
            }
        )

    def retrieve(self, module: str, record_number: int | str) -> dict[str, Any]:
        """Get a single record."""
        record_id = record_ref(module, record_number)
        return self._client.get(
            {
                "operation": "retrieve",
                "sessionName": self.session_id,
                "id": record_id,
            }
        )

    def update(self, module: str, record_number: int | str, data: dict[str, Any]) -> dict[str, Any]:
        """
        Update an existing record.

        The server replaces the record, so all mandatory fields must be
        restated in data alongside the changed ones.

        Args:
            module: Module key
            record_number: Numeric record id within the module
            data: Field values

        Returns:
            The update response, unchanged

        """
        element = dict(data)
        element["id"] = record_ref(module, record_number)

        return self._client.post(
            {
                "operation": "update",
                "sessionName": self.session_id,
                "element": json.dumps(element),
            }
        )

    def delete(self, module: str, record_number: int | str) -> dict[str, Any]:
        """Delete a record."""
        record_id = record_ref(module, record_number)
        return self._client.post(
            {
                "operation": "delete",
                "sessionName": self.session_id,
                "id": record_id,
            }
        )

    def query(self, query: str) -> dict[str, Any]:
        """
        Retrieve records matching a query.

        The query is sent verbatim, e.g.:

            SELECT * | field_list | count(*) FROM module
            WHERE conditions ORDER BY field_list LIMIT m, n;

        Args:
            query: Query string in the web service query language

        Returns:
            The query response, unchanged

        """
        return self._client.get(
            {
                "operation": "query",
                "sessionName": self.session_id,
                "query": query,
            }
        )

    # =========================================================================
    # Metadata
    # =========================================================================

    def list_types(self) -> dict[str, Any]:
        """List the modules accessible to the user."""
        return self._client.get({"operation": "listtypes", "sessionName": self.session_id})

    def describe(self, module: str) -> dict[str, Any]:
        """Get module metadata: permissions, blocks and field configuration."""
        element_type = require_module_name(module)
        return self._client.get(
            {
                "operation": "describe",
                "sessionName": self.session_id,
                "elementType": element_type,
            }
        )

    # =========================================================================
    # Relations
    # =========================================================================

    def retrieve_related(
        self,
        module: str,
        record_number: int | str,
        related_module: str,
        related_label: str,
    ) -> dict[str, Any]:
        """
        Get the records related to a record.

        Args:
            module: Module key of the source record
            record_number: Numeric id of the source record
            related_module: Module key of the related records
            related_label: Relation label (e.g. "Contacts")

        Returns:
            The response, unchanged

        """
        record_id = record_ref(module, record_number)
        related_type = require_module_name(related_module)
        return self._client.get(
            {
                "operation": "retrieve_related",
                "sessionName": self.session_id,
                "id": record_id,
                "relatedLabel": related_label,
                "relatedType": related_type,
            }
        )

    def related_types(self, module: str) -> dict[str, Any]:
        """List the relations a module has with other modules."""
        element_type = require_module_name(module)
        return self._client.get(
            {
                "operation": "relatedtypes",
                "sessionName": self.session_id,
                "elementType": element_type,
            }
        )

    def query_related(self, module: str, record_number: int | str, related_label: str) -> dict[str, Any]:
        """Fetch the records related to a record through a relation label."""
        record_id = record_ref(module, record_number)
        module_name = require_module_name(module)
        return self._client.get(
            {
                "operation": "query_related",
                "sessionName": self.session_id,
                "query": f"SELECT * FROM {module_name}",
                "id": record_id,
                "relatedLabel": related_label,
            }
        )

    def delete_related(
        self,
        source_module: str,
        source_record_number: int | str,
        related_module: str,
        related_record_number: int | str,
    ) -> dict[str, Any]:
        """Break the relationship between two records."""
        source_id = record_ref(source_module, source_record_number)
        related_id = record_ref(related_module, related_record_number)
        return self._client.post(
            {
                "operation": "delete_related",
                "sessionName": self.session_id,
                "sourceRecordId": source_id,
                "relatedRecordId": related_id,
            }
        )

    def add_related(
        self,
        source_module: str,
        source_record_number: int | str,
        related_module: str,
        related_record_number: int | str,
        relation_id_label: str,
    ) -> dict[str, Any]:
        """
        Relate two records.

        Args:
            source_module: Module key of the source record
            source_record_number: Numeric id of the source record
            related_module: Module key of the record to relate
            related_record_number: Numeric id of the record to relate
            relation_id_label: Relation label on the source module

        Returns:
            The response, unchanged

        """
        source_id = record_ref(source_module, source_record_number)
        related_id = record_ref(related_module, related_record_number)
        return self._client.post(
            {
                "operation": "add_related",
                "sessionName": self.session_id,
                "sourceRecordId": source_id,
                "relatedRecordId": related_id,
                "relationIdLabel": relation_id_label,
            }
        )
