from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from rp_roster.clients.card_board_client import CardBoardClient
from rp_roster.clients.identity_client import IdentityResolver
from rp_roster.config.settings import AppSettings, settings
from rp_roster.models.enums import TokenSource
from rp_roster.normalization.field_extractor import FieldExtractor
from rp_roster.normalization.record_merger import merge_records
from rp_roster.storage.cache_gateway import CacheGateway
from rp_roster.utils.misc_utils import cache_key_for_board, unique_in_order


class PipelineVariant(BaseModel):
    """The knobs that distinguish one roster deployment from another."""

    model_config = ConfigDict(frozen=True)

    ttl_seconds: int = Field(..., ge=1)
    token_priority: Tuple[TokenSource, ...] = Field(..., min_length=1)

    @classmethod
    def from_settings(cls, app_settings: AppSettings) -> "PipelineVariant":
        return cls(
            ttl_seconds=app_settings.cache_ttl_seconds,
            token_priority=tuple(app_settings.token_priority),
        )


STRUCTURED_FIRST = PipelineVariant(
    ttl_seconds=3600,
    token_priority=(TokenSource.STRUCTURED_FIELD, TokenSource.DESCRIPTION),
)
DESCRIPTION_FIRST = PipelineVariant(
    ttl_seconds=60,
    token_priority=(TokenSource.DESCRIPTION, TokenSource.STRUCTURED_FIELD),
)


class RosterPipeline:
    """Builds a board's roster: fetch cards, extract tokens, resolve, merge, cache."""

    def __init__(
        self,
        board_id: Optional[str],
        card_client: CardBoardClient,
        resolver: IdentityResolver,
        gateway: CacheGateway,
        variant: PipelineVariant = STRUCTURED_FIRST,
        extractor: Optional[FieldExtractor] = None,
    ):
        self.board_id = board_id
        self.card_client = card_client
        self.resolver = resolver
        self.gateway = gateway
        self.variant = variant
        self.extractor = extractor or FieldExtractor(token_priority=variant.token_priority)

    @classmethod
    def from_settings(
        cls,
        gateway: CacheGateway,
        app_settings: AppSettings = settings,
        card_client: Optional[CardBoardClient] = None,
        resolver: Optional[IdentityResolver] = None,
    ) -> "RosterPipeline":
        variant = PipelineVariant.from_settings(app_settings)
        return cls(
            board_id=app_settings.trello_board_id,
            card_client=card_client
            or CardBoardClient(
                token=app_settings.amazing_fields_token,
                base_url=app_settings.card_api_base_url,
            ),
            resolver=resolver or IdentityResolver(url=app_settings.identity_api_url),
            gateway=gateway,
            variant=variant,
            extractor=FieldExtractor(
                token_priority=variant.token_priority,
                identity_field_names=app_settings.identity_field_names,
                description_token_key=app_settings.description_token_key,
            ),
        )

    @property
    def cache_key(self) -> str:
        return cache_key_for_board(self.board_id or "")

    async def build_roster(self) -> List[Dict[str, Any]]:
        """Runs the uncached chain and returns JSON-ready roster records."""
        cards = await self.card_client.fetch_cards(self.board_id)
        members = self.extractor.extract_all(cards)
        tokens = unique_in_order(member.identity_token for member in members)
        resolved = await self.resolver.resolve(tokens)
        records = merge_records(members, resolved)
        logger.success(f"Built roster with {len(records)} members for board {self.board_id}")
        return [record.to_json() for record in records]

    async def get_roster(self) -> List[Dict[str, Any]]:
        """Returns the cached roster, rebuilding and caching it on a miss."""
        return await self.gateway.get_or_compute(
            self.cache_key, self.variant.ttl_seconds, self.build_roster
        )

    async def close(self) -> None:
        await self.card_client.close()
        await self.resolver.close()
