"""
In-memory challenge records.

Plain dataclasses rather than pydantic models: these never cross a trust
boundary and are created on every issue request.
"""

from __future__ import annotations

from dataclasses import dataclass

from schemas.models.provider import ChallengeMethod


@dataclass(frozen=True)
class GeneratedChallenge:
    """Output of a ChallengeGenerator: what to show and what to expect back."""

    image: str  # data URI
    expected_answer: str
    input_kind: str
    method: ChallengeMethod


@dataclass(frozen=True)
class ChallengeRecord:
    """A pending challenge awaiting its single verify attempt."""

    expected_answer: str
    provider_key: str
    expires_at: float  # Unix timestamp

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


@dataclass(frozen=True)
class IssuedChallenge:
    """What the caller receives from issue(). Never carries the answer."""

    id: str
    input_kind: str
    image: str
