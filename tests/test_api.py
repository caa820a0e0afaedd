"""Tests for the HTTP entry point."""

from fastapi.testclient import TestClient

from rp_roster.api.app import create_app


def test_returns_roster_as_json(make_upstream, make_pipeline):
    app = create_app(pipeline=make_pipeline(make_upstream()))
    with TestClient(app) as client:
        response = client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == [
        {
            "displayName": "Aria",
            "canonicalUsername": "AriaTheBold",
            "externalId": "42",
            "extraProperties": {"Rank": "Captain"},
        }
    ]


def test_resolver_outage_is_an_empty_roster(make_upstream, make_pipeline):
    upstream = make_upstream()
    upstream.identity_status = 503
    with TestClient(create_app(pipeline=make_pipeline(upstream))) as client:
        response = client.get("/")
    assert response.status_code == 200
    assert response.json() == []


def test_upstream_failure_is_opaque_500(make_upstream, make_pipeline):
    upstream = make_upstream()
    upstream.card_status = 502
    with TestClient(create_app(pipeline=make_pipeline(upstream))) as client:
        response = client.get("/")
    assert response.status_code == 500
    assert response.text == "Internal Server Error"
    assert response.headers["content-type"].startswith("text/plain")


def test_missing_credentials_is_opaque_500(make_upstream, make_pipeline):
    with TestClient(create_app(pipeline=make_pipeline(make_upstream(), board_id=None))) as client:
        response = client.get("/")
    assert response.status_code == 500
    assert "TRELLO_BOARD_ID" not in response.text
