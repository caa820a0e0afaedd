from typing import List, Optional, Sequence

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from rp_roster.config.settings import settings
from rp_roster.models.identity import ResolvedIdentity
from .base_client import BaseApiClient, UpstreamFetchError


class UsernameLookupResponse(BaseModel):
    """Body of the batched username lookup endpoint."""

    data: List[ResolvedIdentity] = []


class IdentityResolver(BaseApiClient):
    """Resolves identity tokens to canonical usernames in one batched call.

    Any failure of the lookup service is logged and reported as an empty
    result, so every member of the request is dropped instead of failing
    the whole roster build.
    """

    name = "identity API"

    def __init__(
        self, url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(client=client)
        self.url = url or settings.identity_api_url

    async def resolve(self, tokens: Sequence[str]) -> List[ResolvedIdentity]:
        if not tokens:
            logger.info("No identity tokens to resolve.")
            return []

        body = {"usernames": list(tokens), "excludeBannedUsers": True}
        logger.info(f"Resolving {len(tokens)} identity tokens")
        try:
            response = await self._make_request("POST", self.url, json_data=body)
        except UpstreamFetchError:
            logger.error("Failed to fetch user IDs: identity API unreachable")
            return []

        if not response.is_success:
            logger.error(f"Failed to fetch user IDs: HTTP {response.status_code}")
            return []

        try:
            parsed = UsernameLookupResponse.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f"Failed to parse identity API response: {e}")
            return []

        logger.info(f"Resolved {len(parsed.data)} of {len(tokens)} identity tokens")
        return parsed.data
