"""Interactions endpoint tests with real Ed25519 signatures.

The app lifespan (config validation, command registration) is not entered:
TestClient is used without a ``with`` block.

Usage:
    pytest tests/test_api.py -v
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from nacl.signing import SigningKey

from stiggy.api.routes import get_discord_factory, get_repository_factory
from stiggy.core.config import Settings, get_settings
from stiggy.main import app
from stiggy.services.discord_api import DiscordClient

TIMESTAMP = "1700000000"


@pytest.fixture
def signing_key():
    return SigningKey.generate()


@pytest.fixture
def discord_calls():
    """Requests the app sends to Discord while completing deferred replies."""
    return []


@pytest.fixture
def client(signing_key, repo, discord_calls):
    public_key = signing_key.verify_key.encode().hex()
    settings = Settings(DISCORD_PUBLIC_KEY=public_key, DISCORD_APPLICATION_ID="app-1")

    def discord_handler(request: httpx.Request) -> httpx.Response:
        discord_calls.append((request.method, request.url.path, json.loads(request.content)))
        return httpx.Response(200, json={"id": "message-1"})

    transport = httpx.MockTransport(discord_handler)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_repository_factory] = lambda: (lambda: repo)
    app.dependency_overrides[get_discord_factory] = lambda: (
        lambda: DiscordClient(settings, transport=transport)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def post_signed(client, signing_key, payload, timestamp=TIMESTAMP):
    body = json.dumps(payload).encode()
    signature = signing_key.sign(timestamp.encode() + body).signature.hex()
    return client.post(
        "/interactions",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Signature-Ed25519": signature,
            "X-Signature-Timestamp": timestamp,
        },
    )


# =============================================================================
# Health
# =============================================================================

class TestHealth:

    @pytest.mark.parametrize("path", ["/", "/health"])
    def test_health(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["service"] == "stiggy"


# =============================================================================
# Signature verification
# =============================================================================

class TestSignature:

    def test_ping_gets_pong(self, client, signing_key):
        response = post_signed(client, signing_key, {"type": 1})
        assert response.status_code == 200
        assert response.json() == {"type": 1}

    def test_unsigned_request_rejected(self, client):
        response = client.post("/interactions", json={"type": 1})
        assert response.status_code == 401

    def test_wrong_key_rejected(self, client):
        response = post_signed(client, SigningKey.generate(), {"type": 1})
        assert response.status_code == 401

    def test_tampered_body_rejected(self, client, signing_key):
        body = json.dumps({"type": 1}).encode()
        signature = signing_key.sign(TIMESTAMP.encode() + body).signature.hex()
        response = client.post(
            "/interactions",
            content=b'{"type": 2}',
            headers={"X-Signature-Ed25519": signature, "X-Signature-Timestamp": TIMESTAMP},
        )
        assert response.status_code == 401

    def test_garbage_signature_rejected(self, client):
        response = client.post(
            "/interactions",
            content=b'{"type": 1}',
            headers={"X-Signature-Ed25519": "not-hex", "X-Signature-Timestamp": TIMESTAMP},
        )
        assert response.status_code == 401


# =============================================================================
# Dispatch
# =============================================================================

class TestInteractions:

    def test_command(self, client, signing_key):
        payload = {
            "id": "1",
            "type": 2,
            "token": "t",
            "data": {
                "name": "tune-transmission",
                "options": [{"name": "track", "type": 3, "value": "Suzuka Circuit"}],
            },
            "user": {"id": "user-1", "username": "racer"},
        }
        response = post_signed(client, signing_key, payload)
        assert response.status_code == 200
        body = response.json()
        assert body["type"] == 4
        assert body["data"]["embeds"][0]["title"] == "Transmission Tune: Suzuka Circuit"

    def test_saved_tune_commands_are_deferred(self, client, signing_key, repo, discord_calls):
        payload = {
            "type": 2,
            "data": {
                "name": "tune-save",
                "options": [
                    {"name": "car", "type": 3, "value": "NSX"},
                    {"name": "pp", "type": 4, "value": 600},
                    {"name": "power", "type": 4, "value": 480},
                    {"name": "weight", "type": 4, "value": 3000},
                ],
            },
            "member": {"user": {"id": "user-7", "username": "racer"}, "nick": "Stig"},
        }
        response = post_signed(client, signing_key, {**payload, "token": "tok-1"})
        assert response.status_code == 200
        assert response.json() == {"type": 5}

        [tune] = repo.get_user_tunes("user-7")
        assert tune.author_name == "Stig"
        assert tune.track is None

        [(method, path, data)] = discord_calls
        assert (method, path) == ("PATCH", "/api/v10/webhooks/app-1/tok-1/messages/@original")
        assert tune.id in data["content"]

    def test_private_listing_is_deferred_ephemeral(self, client, signing_key, discord_calls):
        payload = {
            "type": 2,
            "token": "tok-2",
            "data": {"name": "tune-mine"},
            "user": {"id": "ghost", "username": "racer"},
        }
        response = post_signed(client, signing_key, payload)
        assert response.json() == {"type": 5, "data": {"flags": 64}}
        [(_, _, data)] = discord_calls
        # Visibility was set by the acknowledgement
        assert "flags" not in data
        assert "haven't saved" in data["content"]

    def test_calculators_reply_immediately(self, client, signing_key, discord_calls):
        payload = {
            "type": 2,
            "data": {
                "name": "tune-downforce",
                "options": [
                    {"name": "weight", "type": 10, "value": 3000},
                    {"name": "front", "type": 10, "value": 54},
                    {"name": "tire", "type": 3, "value": "RS"},
                ],
            },
        }
        response = post_signed(client, signing_key, payload)
        assert response.json()["type"] == 4
        assert discord_calls == []

    def test_autocomplete(self, client, signing_key):
        payload = {
            "type": 4,
            "data": {
                "name": "tune-transmission",
                "options": [{"name": "track", "type": 3, "value": "tsu", "focused": True}],
            },
        }
        response = post_signed(client, signing_key, payload)
        assert response.json() == {
            "type": 8,
            "data": {"choices": [{"name": "Tsukuba Circuit", "value": "tsukuba circuit"}]},
        }

    def test_malformed_payload(self, client, signing_key):
        response = post_signed(client, signing_key, {"data": {"name": "help"}})
        assert response.status_code == 400

    def test_unsupported_type(self, client, signing_key):
        response = post_signed(client, signing_key, {"type": 3})
        assert response.status_code == 400
