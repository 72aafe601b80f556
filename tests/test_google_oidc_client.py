from __future__ import annotations

import pytest
import requests
from google.auth import exceptions

from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationErrorKind
from app.domain.result import Err, Ok
from app.infrastructure.clients import google_oidc_client
from app.infrastructure.clients.google_oidc_client import GoogleOidcClient


CLIENT_IDS = ("ios.apps.googleusercontent.com", "android.apps.googleusercontent.com")


class FakeIdTokenVerify:
    def __init__(self, payload=None, exc: BaseException | None = None):
        self.payload = payload
        self.exc = exc
        self.calls: list[dict] = []

    def __call__(self, *, token, audience, timeout_seconds):
        self.calls.append({"token": token, "audience": audience, "timeout_seconds": timeout_seconds})
        if self.exc is not None:
            raise self.exc
        return self.payload


def _client() -> GoogleOidcClient:
    return GoogleOidcClient(client_ids=CLIENT_IDS, timeout_seconds=3)


def _transport_error(cause: BaseException) -> exceptions.TransportError:
    error = exceptions.TransportError("certs fetch failed")
    error.__cause__ = cause
    return error


def test_valid_token_maps_profile(monkeypatch):
    fake = FakeIdTokenVerify(
        payload={
            "sub": "108",
            "email": "alice@example.com",
            "name": "Alice Liddell",
            "picture": "https://lh3.googleusercontent.com/a",
        }
    )
    monkeypatch.setattr(google_oidc_client, "id_token_verify", fake)

    result = _client().verify_id_token(id_token="tok")

    assert isinstance(result, Ok)
    profile = result.value
    assert profile.provider is Provider.GOOGLE
    assert profile.provider_user_id == "108"
    assert profile.name == "Alice Liddell"
    assert profile.picture == "https://lh3.googleusercontent.com/a"
    assert profile.email_verified is True
    assert fake.calls == [{"token": "tok", "audience": list(CLIENT_IDS), "timeout_seconds": 3}]


def test_missing_name_falls_back_to_email_local_part(monkeypatch):
    monkeypatch.setattr(
        google_oidc_client,
        "id_token_verify",
        FakeIdTokenVerify(payload={"sub": "108", "email": "alice@example.com"}),
    )

    result = _client().verify_id_token(id_token="tok")

    assert result.value.name == "alice"
    assert result.value.picture is None


@pytest.mark.parametrize("payload", [{"sub": "108"}, {"email": "alice@example.com"}])
def test_missing_claims(monkeypatch, payload):
    monkeypatch.setattr(google_oidc_client, "id_token_verify", FakeIdTokenVerify(payload=payload))

    result = _client().verify_id_token(id_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.MISSING_CLAIMS


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (ValueError("Token expired, 1700000000 < 1700000600"), VerificationErrorKind.EXPIRED_TOKEN),
        (ValueError("Token has wrong audience other, expected one of [...]"), VerificationErrorKind.AUDIENCE_MISMATCH),
        (ValueError("Could not verify token signature."), VerificationErrorKind.INVALID_TOKEN),
        (exceptions.GoogleAuthError("Wrong issuer. 'iss' should be one of ..."), VerificationErrorKind.INVALID_TOKEN),
    ],
)
def test_token_errors_are_classified(monkeypatch, exc, kind):
    monkeypatch.setattr(google_oidc_client, "id_token_verify", FakeIdTokenVerify(exc=exc))

    result = _client().verify_id_token(id_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is kind


def test_certs_timeout_is_provider_unavailable(monkeypatch):
    exc = _transport_error(requests.exceptions.ReadTimeout("read timed out"))
    monkeypatch.setattr(google_oidc_client, "id_token_verify", FakeIdTokenVerify(exc=exc))

    result = _client().verify_id_token(id_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.PROVIDER_UNAVAILABLE


def test_other_network_failure_fails_closed(monkeypatch):
    exc = _transport_error(requests.exceptions.ConnectionError("connection refused"))
    monkeypatch.setattr(google_oidc_client, "id_token_verify", FakeIdTokenVerify(exc=exc))

    result = _client().verify_id_token(id_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.INVALID_TOKEN


def test_unconfigured_client_rejects_without_verifying(monkeypatch):
    fake = FakeIdTokenVerify(payload={"sub": "108", "email": "alice@example.com"})
    monkeypatch.setattr(google_oidc_client, "id_token_verify", fake)

    result = GoogleOidcClient(client_ids=("",), timeout_seconds=3).verify_id_token(id_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.INVALID_TOKEN
    assert fake.calls == []
