"""Credential source: one deterministic candidate stream per attack mode."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from redfox.errors import ExhaustedInputError, InputError

from .generators import (
    DEFAULT_SUFFIXES,
    brute_force_pairs,
    count_brute_force,
    dictionary_pairs,
    hybrid_pairs,
    mutate,
    resolve_charset,
    stuffing_pairs,
)
from .models import AttackMode, CandidateOrder, CredentialPair
from .wordlists import load_combos, load_wordlist

logger = logging.getLogger(__name__)


@dataclass
class CredentialSource:
    """Lazy, finite, resumable stream of credential pairs."""

    mode: AttackMode
    users: list[str] = field(default_factory=list)
    passwords: list[str] = field(default_factory=list)
    combos: list[tuple[str, str]] = field(default_factory=list)
    order: CandidateOrder = CandidateOrder.USER_FIRST
    charset: str = "digits"
    min_length: int = 1
    max_length: int = 4
    suffixes: Sequence[str] = DEFAULT_SUFFIXES
    label: str = ""

    def __post_init__(self) -> None:
        if self.mode is AttackMode.STUFFING:
            if not self.combos:
                raise ExhaustedInputError("Credential stuffing requires a non-empty combo list")
            return
        if not self.users:
            raise ExhaustedInputError("User list is empty")
        if self.mode is AttackMode.BRUTE_FORCE:
            if not self.charset:
                raise InputError("Brute-force mode requires a charset")
            if self.min_length < 1 or self.max_length < self.min_length:
                raise InputError(f"Invalid length range {self.min_length}..{self.max_length}")
        elif not self.passwords:
            raise ExhaustedInputError("Password list is empty")

    @classmethod
    def from_inputs(
        cls,
        mode: AttackMode,
        user_input: str | None = None,
        password_input: str | None = None,
        combo_input: str | None = None,
        search_paths: Iterable[str | Path] = (),
        order: CandidateOrder = CandidateOrder.USER_FIRST,
        charset: str = "digits",
        min_length: int = 1,
        max_length: int = 4,
        suffixes: Sequence[str] | None = None,
        separator: str = ":",
    ) -> CredentialSource:
        """Load wordlists for ``mode`` and build the source."""
        search_paths = list(search_paths)
        if mode is AttackMode.STUFFING:
            combos = load_combos(combo_input, search_paths, separator=separator)
            logger.info("Loaded %d credential pairs", len(combos))
            return cls(mode=mode, combos=combos, label=_label(combo_input))

        users = load_wordlist(user_input, search_paths, role="user list")
        passwords: list[str] = []
        if mode is not AttackMode.BRUTE_FORCE:
            passwords = load_wordlist(password_input, search_paths, role="password list")
        logger.info("Loaded %d user(s) and %d password(s)", len(users), len(passwords))
        return cls(
            mode=mode,
            users=users,
            passwords=passwords,
            order=order,
            charset=resolve_charset(charset) if mode is AttackMode.BRUTE_FORCE else charset,
            min_length=min_length,
            max_length=max_length,
            suffixes=tuple(suffixes) if suffixes is not None else DEFAULT_SUFFIXES,
            label=_label(password_input),
        )

    def _pairs(self) -> Iterator[CredentialPair]:
        if self.mode is AttackMode.DICTIONARY:
            provenance = f"dictionary:{self.label}" if self.label else "dictionary"
            return dictionary_pairs(self.users, self.passwords, self.order, provenance)
        if self.mode is AttackMode.BRUTE_FORCE:
            return brute_force_pairs(
                self.users, self.charset, self.min_length, self.max_length, self.order
            )
        if self.mode is AttackMode.HYBRID:
            provenance = f"hybrid:{self.label}" if self.label else "hybrid"
            return hybrid_pairs(self.users, self.passwords, self.suffixes, self.order, provenance)
        provenance = f"credential-stuffing:{self.label}" if self.label else "credential-stuffing"
        return stuffing_pairs(self.combos, provenance)

    def iter_pairs(self, start: int = 0) -> Iterator[tuple[int, CredentialPair]]:
        """Yield ``(index, pair)`` beginning at candidate ``start``."""
        if start < 0:
            raise InputError("Resume offset must not be negative")
        return enumerate(itertools.islice(self._pairs(), start, None), start=start)

    def __iter__(self) -> Iterator[CredentialPair]:
        return self._pairs()

    def total(self) -> int:
        """Exact number of candidates the stream yields."""
        if self.mode is AttackMode.STUFFING:
            return len(self.combos)
        if self.mode is AttackMode.BRUTE_FORCE:
            per_user = count_brute_force(self.charset, self.min_length, self.max_length)
        elif self.mode is AttackMode.HYBRID:
            per_user = sum(len(mutate(word, self.suffixes)) for word in self.passwords)
        else:
            per_user = len(self.passwords)
        if self.order is CandidateOrder.PAIRED:
            return min(len(self.users), per_user)
        return len(self.users) * per_user


def _label(value: str | None) -> str:
    if not value:
        return ""
    if value.startswith("@"):
        return value
    path = Path(value).expanduser()
    return path.name if path.exists() else "inline"
