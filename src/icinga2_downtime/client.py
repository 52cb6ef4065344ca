"""Icinga2 action API client with error handling and type safety."""

import logging
from typing import Any, Dict, Optional

import httpx

from .models import ApiResponse, DowntimeAction, EndpointContext, RequestDescriptor

logger = logging.getLogger(__name__)


class Icinga2APIError(Exception):
    """Base exception for Icinga2 API errors."""
    pass


class PreconditionError(Icinga2APIError):
    """No usable endpoint/credential record is available."""
    pass


class TransportError(Icinga2APIError):
    """The HTTP exchange itself failed (connection refused, TLS error, ...)."""
    pass


class NotFoundError(Icinga2APIError):
    """The API rejected the request without an error field; usually an empty filter match."""
    pass


class RemoteStatusError(Icinga2APIError):
    """The API reported an error; the message is the remote status text."""
    pass


class StatusParseError(Icinga2APIError):
    """A success status message did not have the expected quoting."""
    pass


class Icinga2Client:
    """
    Asynchronous client for the Icinga2 action API.

    Handles authentication, request/response formatting and transport errors.
    Non-200 result codes are not raised here; callers classify the returned
    ApiResponse themselves.
    """

    def __init__(
        self,
        endpoint: EndpointContext,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Icinga2 API client.

        Args:
            endpoint: Resolved API target and credentials
            transport: Optional httpx transport (used to substitute a mock in tests)
        """
        self.endpoint = endpoint
        self.base_url = endpoint.base_url
        self.auth = (endpoint.username, endpoint.password.get_secret_value())
        self.verify_ssl = endpoint.verify_ssl
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        if not self.verify_ssl:
            logger.warning(
                f"SSL certificate verification is DISABLED for {self.base_url}"
            )

        self.client = httpx.AsyncClient(
            auth=self.auth,
            verify=self.verify_ssl,
            timeout=self.endpoint.timeout,
            headers={
                "Accept": "application/json",
                "X-HTTP-Method-Override": "POST",
            },
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def _request(
        self, method: str, endpoint: str, json_data: Optional[Dict[str, Any]] = None
    ) -> ApiResponse:
        """
        Make an authenticated request to the Icinga2 API.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path
            json_data: Optional JSON payload

        Returns:
            Parsed API response, whatever its result code

        Raises:
            TransportError: On connection or TLS failures
        """
        if not self.client:
            raise Icinga2APIError("Client not initialized. Use async context manager.")

        url = f"{self.base_url}/v1{endpoint}"
        logger.debug(f"{method} {url} {json_data}")

        try:
            response = await self.client.request(method, url, json=json_data)
        except httpx.RequestError as e:
            raise TransportError(f"Connection error: {str(e) or type(e).__name__}") from e

        try:
            data = response.json()
        except ValueError:
            # Icinga2 answers some authentication failures with plain text
            data = {"error": response.status_code, "status": response.text.strip()}

        if not isinstance(data, dict):
            data = {}

        return ApiResponse.from_payload(response.status_code, data)

    async def perform_action(
        self, action: DowntimeAction, descriptor: RequestDescriptor
    ) -> ApiResponse:
        """
        Perform an action on Icinga2 objects.

        Args:
            action: Action endpoint (schedule-downtime or remove-downtime)
            descriptor: Request descriptor providing the JSON body

        Returns:
            Action response
        """
        return await self._request("POST", f"/actions/{action.value}", descriptor.payload())
