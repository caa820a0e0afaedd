from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from rp_roster.models.card import RawCard
from rp_roster.models.enums import TokenSource
from rp_roster.models.identity import TEMPLATE_CARD_NAME, ExtractedIdentity
from rp_roster.normalization.description_parser import parse_description

DEFAULT_IDENTITY_FIELD_NAMES = ("IGN", "Honorary Titles")
DEFAULT_TOKEN_PRIORITY = (TokenSource.STRUCTURED_FIELD, TokenSource.DESCRIPTION)


class FieldExtractor:
    """Turns raw board cards into member identities.

    A card is a member when it has a real display name and an identity token.
    The token comes from exactly one source, tried in ``token_priority`` order:
    the ``IGN`` key of the parsed description, or a recognised structured
    field. The remaining description entries become the record's extra
    properties.
    """

    def __init__(
        self,
        token_priority: Sequence[TokenSource] = DEFAULT_TOKEN_PRIORITY,
        identity_field_names: Iterable[str] = DEFAULT_IDENTITY_FIELD_NAMES,
        description_token_key: str = "IGN",
    ):
        if not token_priority:
            raise ValueError("token_priority must name at least one source")
        self.token_priority: Tuple[TokenSource, ...] = tuple(token_priority)
        self.identity_field_names = frozenset(identity_field_names)
        self.description_token_key = description_token_key
        logger.debug(
            f"FieldExtractor initialized with priority "
            f"{[source.value for source in self.token_priority]} and fields "
            f"{sorted(self.identity_field_names)}"
        )

    def _token_from_description(
        self, properties: Optional[Dict[str, str]]
    ) -> Optional[str]:
        if not properties:
            return None
        return properties.get(self.description_token_key) or None

    def _token_from_fields(self, card: RawCard) -> Optional[str]:
        for field in card.card_fields:
            if field.name in self.identity_field_names and field.value:
                token = field.value.strip()
                if token:
                    return token
        return None

    def _extra_properties(
        self, properties: Optional[Dict[str, str]]
    ) -> Optional[Dict[str, str]]:
        if not properties:
            return None
        extra = {
            key: value
            for key, value in properties.items()
            if key != self.description_token_key
        }
        return extra or None

    def extract(self, card: RawCard) -> Optional[ExtractedIdentity]:
        """Returns the card's identity, or None if the card is not a member."""
        display_name = card.name
        if not display_name or display_name == TEMPLATE_CARD_NAME:
            return None

        properties = parse_description(card.desc)

        token: Optional[str] = None
        for source in self.token_priority:
            if source is TokenSource.DESCRIPTION:
                token = self._token_from_description(properties)
            else:
                token = self._token_from_fields(card)
            if token:
                break

        if not token:
            return None

        return ExtractedIdentity(
            display_name=display_name,
            identity_token=token,
            extra_properties=self._extra_properties(properties),
        )

    def extract_all(self, cards: Iterable[RawCard]) -> List[ExtractedIdentity]:
        """Extracts identities from all member cards, preserving board order."""
        extracted: List[ExtractedIdentity] = []
        skipped = 0
        for card in cards:
            identity = self.extract(card)
            if identity is None:
                skipped += 1
                continue
            extracted.append(identity)
        logger.info(
            f"Extracted {len(extracted)} member identities, skipped {skipped} cards."
        )
        return extracted
