from __future__ import annotations

import pytest

from app.application.dto.auth import VerifiedProfile
from app.application.use_cases.verify_identity import IdentityVerifier
from app.domain.entities.user import Provider
from app.domain.exceptions import VerificationError, VerificationErrorKind
from app.domain.result import Err, Ok


class FakeProviderVerifier:
    def __init__(self, provider: Provider, result=None):
        self.provider = provider
        self.result = result
        self.calls: list[tuple[str, object]] = []

    def verify_id_token(self, *, id_token, user_info=None):
        self.calls.append((id_token, user_info))
        if self.result is not None:
            return self.result
        return Ok(
            VerifiedProfile(
                provider=self.provider,
                provider_user_id="sub-1",
                email="alice@example.com",
                name="Alice",
                picture=None,
                email_verified=True,
            )
        )


def _verifiers(overrides=None):
    verifiers = {provider: FakeProviderVerifier(provider) for provider in Provider}
    verifiers.update(overrides or {})
    return verifiers


def test_construction_requires_every_provider():
    with pytest.raises(ValueError, match="apple"):
        IdentityVerifier(verifiers={Provider.GOOGLE: FakeProviderVerifier(Provider.GOOGLE)})


def test_dispatches_to_provider_verifier():
    verifiers = _verifiers()
    verifier = IdentityVerifier(verifiers=verifiers)

    result = verifier.verify(provider=Provider.APPLE, raw_token=" tok ")

    assert isinstance(result, Ok)
    assert result.value.provider is Provider.APPLE
    assert verifiers[Provider.APPLE].calls == [("tok", None)]
    assert verifiers[Provider.GOOGLE].calls == []


@pytest.mark.parametrize("raw_token", ["", "   "])
def test_empty_token_is_rejected_without_provider_call(raw_token):
    verifiers = _verifiers()
    verifier = IdentityVerifier(verifiers=verifiers)

    result = verifier.verify(provider=Provider.GOOGLE, raw_token=raw_token)

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.INVALID_TOKEN
    assert verifiers[Provider.GOOGLE].calls == []


def test_provider_error_is_passed_through():
    failing = FakeProviderVerifier(
        Provider.GOOGLE,
        result=Err(VerificationError(VerificationErrorKind.AUDIENCE_MISMATCH)),
    )
    verifier = IdentityVerifier(verifiers=_verifiers({Provider.GOOGLE: failing}))

    result = verifier.verify(provider=Provider.GOOGLE, raw_token="tok")

    assert isinstance(result, Err)
    assert result.error.kind is VerificationErrorKind.AUDIENCE_MISMATCH
