"""
Shared test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests. Tests control config exclusively through monkeypatch.setenv()
or explicit constructor arguments.
"""

import pytest

from config import CaptchaSettings
from infrastructure.cache.challenge_store import ChallengeStore
from infrastructure.cache.proof_store import VerifiedProofStore
from infrastructure.providers.memory_directory import InMemoryProviderDirectory
from schemas.models.challenge import GeneratedChallenge
from schemas.models.provider import ChallengeMethod, ProviderConfig
from services.captcha_service import CaptchaLifecycleService

PROVIDER_KEY = "ABCDEFGHIJ"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubGenerator:
    """Deterministic ChallengeGenerator: fixed answers, no image rendering."""

    def __init__(self, text_answer: str = "Qx7f", math_answer: str = "17") -> None:
        self.text_answer = text_answer
        self.math_answer = math_answer
        self.calls: list[ChallengeMethod] = []

    def generate(self, method: ChallengeMethod) -> GeneratedChallenge:
        self.calls.append(method)
        answer = self.math_answer if method is ChallengeMethod.ARITHMETIC else self.text_answer
        return GeneratedChallenge(
            image=f"data:image/png;base64,{method.value}",
            expected_answer=answer,
            input_kind="text",
            method=method,
        )


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def generator():
    return StubGenerator()


@pytest.fixture
def provider():
    return ProviderConfig(
        key=PROVIDER_KEY,
        method=ChallengeMethod.TEXT,
        overrides={"example.com": ChallengeMethod.ARITHMETIC},
    )


@pytest.fixture
def directory(provider):
    return InMemoryProviderDirectory([provider])


@pytest.fixture
def captcha_settings():
    return CaptchaSettings()


@pytest.fixture
def service(directory, generator, clock, captcha_settings):
    return CaptchaLifecycleService(
        providers=directory,
        generator=generator,
        challenges=ChallengeStore(),
        proofs=VerifiedProofStore(),
        settings=captcha_settings,
        clock=clock,
    )
