from typing import Dict, List, Sequence

from loguru import logger

from rp_roster.models.identity import ExtractedIdentity, MergedRecord, ResolvedIdentity


def merge_records(
    extracted: Sequence[ExtractedIdentity], resolved: Sequence[ResolvedIdentity]
) -> List[MergedRecord]:
    """Joins extracted card identities with resolved platform identities.

    Tokens are matched exactly (case-sensitive); the first resolved entry for
    a token wins and is used by at most one card. Cards without a match are
    dropped. Output keeps the order of ``extracted``.
    """
    by_token: Dict[str, ResolvedIdentity] = {}
    for identity in resolved:
        by_token.setdefault(identity.requested_token, identity)

    merged: List[MergedRecord] = []
    for member in extracted:
        match = by_token.pop(member.identity_token, None)
        if match is None:
            logger.debug(
                f"No resolved identity for '{member.display_name}' "
                f"(token '{member.identity_token}'), dropping."
            )
            continue
        merged.append(
            MergedRecord(
                display_name=member.display_name,
                canonical_username=match.canonical_username,
                external_id=match.external_id,
                extra_properties=member.extra_properties,
            )
        )

    logger.info(
        f"Merged {len(merged)} of {len(extracted)} member identities "
        f"against {len(resolved)} resolved entries."
    )
    return merged
