"""Credential candidate models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class AttackMode(StrEnum):
    """Strategy used to generate candidate pairs."""

    DICTIONARY = "dictionary"
    BRUTE_FORCE = "brute-force"
    HYBRID = "hybrid"
    STUFFING = "credential-stuffing"


class CandidateOrder(StrEnum):
    """Iteration order for user x password combinations."""

    USER_FIRST = "user-first"
    PASSWORD_FIRST = "password-first"
    PAIRED = "paired"


@dataclass(frozen=True, slots=True)
class CredentialPair:
    """One username/password candidate.

    Identity (equality and hashing) ignores provenance.
    """

    username: str
    password: str
    provenance: str = field(default="", compare=False)

    @property
    def key(self) -> tuple[str, str]:
        return (self.username, self.password)

    def __str__(self) -> str:
        return f"{self.username}:{self.password}"
