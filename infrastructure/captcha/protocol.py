"""ChallengeGenerator protocol: services depend on this, not the concrete implementation."""

from typing import Protocol

from schemas.models.challenge import GeneratedChallenge
from schemas.models.provider import ChallengeMethod


class ChallengeGenerator(Protocol):
    def generate(self, method: ChallengeMethod) -> GeneratedChallenge: ...
