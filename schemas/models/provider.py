"""
Provider record model.

A provider is an integrator account that embeds captchas on its own sites.
The record is owned by the external key/value store; this service only reads
it on issue and bumps one counter per verify attempt.

Stored layout (one record per provider key):
    method              default challenge method
    override.<hostname> per-site method that wins over the default
    good / bad          cumulative verify outcomes
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChallengeMethod(str, Enum):
    TEXT = "text"
    ARITHMETIC = "arithmetic"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ChallengeMethod"]:
        # Older records store arithmetic challenges as "math"
        if isinstance(value, str) and value.lower() == "math":
            return cls.ARITHMETIC
        return None


class Outcome(str, Enum):
    GOOD = "good"
    BAD = "bad"


class ProviderConfig(BaseModel):
    """Provider configuration plus its outcome counters."""

    model_config = ConfigDict(populate_by_name=True)

    key: str
    method: ChallengeMethod = ChallengeMethod.TEXT
    overrides: dict[str, ChallengeMethod] = Field(default_factory=dict, alias="override")
    good: int = Field(default=0, ge=0)
    bad: int = Field(default=0, ge=0)

    @field_validator("method", mode="before")
    @classmethod
    def _coerce_method(cls, v: object) -> object:
        if isinstance(v, str):
            return ChallengeMethod(v)
        return v

    @field_validator("overrides", mode="before")
    @classmethod
    def _normalise_overrides(cls, v: object) -> object:
        if isinstance(v, dict):
            return {
                str(host).lower(): ChallengeMethod(method) if isinstance(method, str) else method
                for host, method in v.items()
            }
        return v

    def method_for(self, hostname: Optional[str]) -> ChallengeMethod:
        """Return the effective method for a request from *hostname*."""
        if hostname and hostname in self.overrides:
            return self.overrides[hostname]
        return self.method
