from typing import Any, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from rp_roster.config.settings import settings
from rp_roster.models.card import RawCard
from .base_client import BaseApiClient, MissingCredentialError, UpstreamFetchError


class CardBoardClient(BaseApiClient):
    """Fetches the raw card list of a board from the Amazing Fields API."""

    name = "card board API"

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(client=client)
        self.token = token if token is not None else settings.amazing_fields_token
        self.base_url = (base_url or settings.card_api_base_url).rstrip("/")

    def _parse_cards(self, payload: Any) -> List[RawCard]:
        if not isinstance(payload, dict) or not isinstance(payload.get("cards"), list):
            logger.error("Card board response has no 'cards' list.")
            raise UpstreamFetchError("Malformed card board response")

        cards: List[RawCard] = []
        for index, raw_card in enumerate(payload["cards"]):
            try:
                cards.append(RawCard.model_validate(raw_card))
            except ValidationError as e:
                logger.warning(f"Skipping card #{index} that failed validation: {e}")
        return cards

    async def fetch_cards(self, board_id: Optional[str]) -> List[RawCard]:
        """Fetches every card on the board.

        Raises:
            MissingCredentialError: board id or token is not configured.
            UpstreamFetchError: the API is unreachable, answers non-2xx, or
                returns a body without a card list.
        """
        if not board_id or not self.token:
            logger.error("Board id or card board token is not configured.")
            raise MissingCredentialError(
                "TRELLO_BOARD_ID and AMAZING_FIELDS_TOKEN must be set"
            )

        url = f"{self.base_url}/boards/{board_id}/cards"
        logger.info(f"Fetching cards for board {board_id}")
        response = await self._make_request(
            "GET", url, params={"token": self.token}
        )

        if not response.is_success:
            logger.error(
                f"Failed to fetch data from card board API: HTTP {response.status_code}"
            )
            raise UpstreamFetchError(
                "Failed to fetch data from API", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Card board API returned invalid JSON: {e}")
            raise UpstreamFetchError("Card board API returned invalid JSON") from e

        cards = self._parse_cards(payload)
        logger.info(f"Fetched {len(cards)} cards for board {board_id}")
        return cards
