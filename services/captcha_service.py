"""
Captcha lifecycle: issue → verify → check.

Each challenge id moves through ``Issued → Verified | Rejected | Expired``
and is terminal after its first verify attempt or after the sweeper drops it.
A successful verify promotes the same id to a proof that a relying party can
redeem with ``check`` until the proof TTL runs out.

Unknown providers and unknown, expired or already-consumed challenge ids all
fail with the same generic error so callers cannot probe for existence.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from config import CaptchaSettings
from errors import (
    UnknownOrExpiredChallengeError,
    UnknownProviderError,
    UpstreamStoreError,
    ValidationError,
)
from infrastructure.cache.challenge_store import ChallengeStore
from infrastructure.cache.proof_store import VerifiedProofStore
from infrastructure.captcha.protocol import ChallengeGenerator
from infrastructure.providers.protocol import ProviderDirectory
from schemas.models.challenge import ChallengeRecord, IssuedChallenge
from schemas.models.provider import Outcome
from shared.generators import generate_challenge_id
from shared.logging import get_logger
from shared.validators import (
    parse_site_hostname,
    validate_challenge_id,
    validate_provider_key,
)

log = get_logger(__name__)

Clock = Callable[[], float]


class CaptchaLifecycleService:
    def __init__(
        self,
        providers: ProviderDirectory,
        generator: ChallengeGenerator,
        challenges: ChallengeStore,
        proofs: VerifiedProofStore,
        settings: Optional[CaptchaSettings] = None,
        clock: Clock = time.time,
        id_factory: Callable[[int], str] = generate_challenge_id,
    ) -> None:
        self.providers = providers
        self.generator = generator
        self.challenges = challenges
        self.proofs = proofs
        self.settings = settings or CaptchaSettings()
        self._clock = clock
        self._id_factory = id_factory

    async def issue(self, provider_key: Any, site: Optional[str] = None) -> IssuedChallenge:
        """Create a challenge for *provider_key* and return what the widget shows.

        The origin hint *site* selects a per-hostname override when it parses
        as a URL; anything else falls back to the provider's default method.

        Raises:
            ValidationError: key missing or of the wrong length.
            UnknownProviderError: no provider with that key.
            UpstreamStoreError: provider store unreachable.
        """
        if not validate_provider_key(provider_key, self.settings.provider_key_length):
            raise ValidationError("Key required", field="key")

        provider = await self.providers.get(provider_key)
        if provider is None:
            log.info("challenge_issue_rejected", provider=provider_key, reason="unknown_provider")
            raise UnknownProviderError("invalid key")

        method = provider.method_for(parse_site_hostname(site))
        challenge_id = self._id_factory(self.settings.challenge_id_length)
        generated = self.generator.generate(method)

        self.challenges.put(
            challenge_id,
            ChallengeRecord(
                expected_answer=generated.expected_answer,
                provider_key=provider.key,
                expires_at=self._clock() + self.settings.challenge_ttl_seconds,
            ),
        )
        log.info(
            "challenge_issued",
            provider=provider.key,
            method=method.value,
            challenge_id=challenge_id,
        )
        return IssuedChallenge(
            id=challenge_id, input_kind=generated.input_kind, image=generated.image
        )

    async def verify(self, challenge_id: Any, answer: Any) -> bool:
        """Consume the challenge and report whether *answer* matched.

        Comparison is case-insensitive and purely textual, also for
        arithmetic challenges. If the outcome cannot be recorded because the
        provider store is down, the challenge is put back so the caller can
        retry before it expires.

        Counting is at-least-once: a timeout can fire after Redis already
        applied the increment, and the retry then records the outcome again.
        Over-counting a provider's statistics is preferred to refusing a
        user who answered correctly.

        Raises:
            ValidationError: id or answer missing or malformed.
            UnknownOrExpiredChallengeError: id never issued, expired or used.
            UpstreamStoreError: outcome could not be recorded.
        """
        if not validate_challenge_id(challenge_id, self.settings.challenge_id_length):
            raise ValidationError("invalid body", field="id")
        if not isinstance(answer, str):
            raise ValidationError("invalid body", field="input")

        now = self._clock()
        record = self.challenges.take_if_valid(challenge_id, now)
        if record is None:
            raise UnknownOrExpiredChallengeError("invalid id")

        match = record.expected_answer.lower() == answer.lower()
        outcome = Outcome.GOOD if match else Outcome.BAD
        try:
            await self.providers.increment_outcome(record.provider_key, outcome)
        except UpstreamStoreError:
            if not record.is_expired(self._clock()):
                self.challenges.put(challenge_id, record)
            raise

        if match:
            self.proofs.put(challenge_id, self._clock() + self.settings.proof_ttl_seconds)

        log.info(
            "challenge_verified",
            provider=record.provider_key,
            challenge_id=challenge_id,
            outcome=outcome.value,
        )
        return match

    def check(self, challenge_id: Any) -> bool:
        """True while *challenge_id* holds a live proof. Never raises."""
        if not isinstance(challenge_id, str) or not challenge_id:
            return False
        return self.proofs.exists(challenge_id, self._clock())

    def sweep(self) -> tuple[int, int]:
        """Drop expired challenges and proofs. Returns (challenges, proofs) removed."""
        now = self._clock()
        return self.challenges.sweep(now), self.proofs.sweep(now)
