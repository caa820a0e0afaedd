"""Shared fixtures: httpx MockTransport stubs for both upstream APIs."""

import json
from typing import Callable, Dict, List

import httpx
import pytest

from rp_roster.clients.card_board_client import CardBoardClient
from rp_roster.clients.identity_client import IdentityResolver
from rp_roster.pipeline import STRUCTURED_FIRST, RosterPipeline
from rp_roster.storage.cache_gateway import CacheGateway
from rp_roster.storage.memory_store import InMemoryCacheStore

BOARD_ID = "board123"
TOKEN = "secret-board-token"
CARD_API = "https://cards.test/api"
IDENTITY_API = "https://users.test/v1/usernames/users"


class UpstreamStub:
    """Records calls and serves canned responses for the two upstream APIs."""

    def __init__(self, cards: List[dict], users: Dict[str, dict]):
        self.cards = cards
        self.users = users
        self.card_status = 200
        self.identity_status = 200
        self.card_calls: List[httpx.Request] = []
        self.identity_calls: List[httpx.Request] = []

    def card_handler(self, request: httpx.Request) -> httpx.Response:
        self.card_calls.append(request)
        if self.card_status != 200:
            return httpx.Response(self.card_status, text="nope")
        return httpx.Response(200, json={"cards": self.cards})

    def identity_handler(self, request: httpx.Request) -> httpx.Response:
        self.identity_calls.append(request)
        if self.identity_status != 200:
            return httpx.Response(self.identity_status, text="unavailable")
        body = json.loads(request.content)
        data = [
            {"requestedUsername": name, "hasVerifiedBadge": False, **self.users[name]}
            for name in body["usernames"]
            if name in self.users
        ]
        return httpx.Response(200, json={"data": data})

    def card_client(self, token: str = TOKEN) -> CardBoardClient:
        return CardBoardClient(
            token=token,
            base_url=CARD_API,
            client=httpx.AsyncClient(transport=httpx.MockTransport(self.card_handler)),
        )

    def resolver(self) -> IdentityResolver:
        return IdentityResolver(
            url=IDENTITY_API,
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(self.identity_handler)
            ),
        )


ARIA_CARD = {
    "name": "Aria",
    "desc": "IGN: aria_the_bold\nRank: Captain",
    "fields": [],
}
ARIA_USER = {"aria_the_bold": {"name": "AriaTheBold", "id": 42}}


@pytest.fixture
def make_upstream() -> Callable[..., UpstreamStub]:
    def _make(cards: List[dict] = None, users: Dict[str, dict] = None) -> UpstreamStub:
        return UpstreamStub(
            cards if cards is not None else [ARIA_CARD],
            users if users is not None else ARIA_USER,
        )

    return _make


@pytest.fixture
def store() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def make_pipeline(store):
    def _make(upstream: UpstreamStub, variant=STRUCTURED_FIRST, token: str = TOKEN, board_id=BOARD_ID):
        return RosterPipeline(
            board_id=board_id,
            card_client=upstream.card_client(token=token),
            resolver=upstream.resolver(),
            gateway=CacheGateway(store),
            variant=variant,
        )

    return _make
