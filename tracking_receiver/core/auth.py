"""Shared API key check for webhook ingest and privileged lookups."""

import hmac
from collections.abc import Mapping
from typing import Any

import structlog

from tracking_receiver.core.exceptions import Unauthorized
from tracking_receiver.services.credential_store import CredentialStore

logger = structlog.get_logger(__name__)


def _matches(candidate: Any, expected: str) -> bool:
    if not isinstance(candidate, str) or not candidate:
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


class ApiKeyGate:
    """Accepts a request whose header or parameter carries the stored API key.

    The header is checked first, then the parameter; either one matching is
    enough. Without a stored key every request is denied.
    """

    def __init__(self, credentials: CredentialStore, header_name: str = "X-API-Key", param_name: str = "api_key"):
        self.credentials = credentials
        self.header_name = header_name
        self.param_name = param_name

    async def authenticate(self, headers: Mapping[str, str], params: Mapping[str, Any]) -> None:
        """Raise ``Unauthorized`` unless the request carries the current key.

        Args:
            headers: Request headers. Lookup is case-insensitive on the name
                when a Starlette ``Headers`` object is passed.
            params: Query string merged with JSON body parameters
        """
        saved_key = await self.credentials.get_key()
        if not saved_key:
            logger.warning("api_key_rejected", reason="no_key_configured")
            raise Unauthorized("API key is not configured")

        if _matches(headers.get(self.header_name), saved_key):
            return
        if _matches(params.get(self.param_name), saved_key):
            return

        logger.warning(
            "api_key_rejected",
            reason="mismatch",
            header_present=self.header_name in headers,
            param_present=self.param_name in params,
        )
        raise Unauthorized()
