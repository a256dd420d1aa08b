"""
People Lookup Provider

Client for the external people search service - finds candidate
contact records for an email address.
"""

from typing import Optional, List

import httpx
from pydantic import ValidationError

from people_shared.config.settings import settings
from people_shared.models.person import LookupCandidate
from people_shared.utils.logger import get_logger

from ..errors import LookupServiceError

logger = get_logger(__name__)


class PeopleLookupClient:
    """
    Provider for the people search API

    GET {base_url}?email=<email>[&key=<api key>] -> {"items": [...]}
    Items come back in the service's relevance order.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url or settings.lookup_api_url
        self.api_key = api_key if api_key is not None else settings.lookup_api_key
        self.timeout = timeout or settings.lookup_timeout_seconds
        self._transport = transport

    async def search(self, email: str) -> List[LookupCandidate]:
        """
        Search people by email

        Returns:
            Candidates in relevance order (empty list when nothing matches)

        Raises:
            LookupServiceError: transport failure or unusable response
        """
        params = {"email": email}
        if self.api_key:
            params["key"] = self.api_key

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            logger.warning("people_lookup_timeout", email=email)
            raise LookupServiceError(None, f"lookup timed out: {e}", retriable=True) from e
        except httpx.TransportError as e:
            logger.warning("people_lookup_transport_error", email=email, error=str(e))
            raise LookupServiceError(None, f"lookup transport error: {e}", retriable=True) from e
        except httpx.RequestError as e:
            # Undecodable body, redirect loop and the like
            logger.warning("people_lookup_request_error", email=email, error_type=type(e).__name__, error=str(e))
            raise LookupServiceError(None, f"lookup request failed: {e}", retriable=True) from e

        if response.status_code == 404:
            logger.debug("people_lookup_not_found", email=email)
            return []

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning("people_lookup_unavailable", email=email, status_code=response.status_code)
            raise LookupServiceError(
                None,
                f"lookup service returned HTTP {response.status_code}",
                retriable=True,
                status_code=response.status_code
            )

        if response.status_code != 200:
            logger.error(
                "people_lookup_rejected",
                email=email,
                status_code=response.status_code,
                response=response.text[:200]
            )
            raise LookupServiceError(
                None,
                f"lookup service returned HTTP {response.status_code}",
                retriable=False,
                status_code=response.status_code
            )

        try:
            payload = response.json()
            items = payload.get("items") or []
            if not isinstance(items, list):
                raise ValueError(f"items is {type(items).__name__}, expected a list")
            candidates = [LookupCandidate.model_validate(item) for item in items]
        except (ValueError, AttributeError, ValidationError) as e:
            logger.error("people_lookup_bad_payload", email=email, error=str(e))
            raise LookupServiceError(None, f"malformed lookup response: {e}", retriable=False) from e

        logger.debug("people_lookup_success", email=email, candidates=len(candidates))
        return candidates
