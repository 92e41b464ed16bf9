"""Candidate generators for each attack mode.

Every generator is deterministic: the same inputs always yield the same
sequence, which is what makes offset-based resumption possible.
"""

from __future__ import annotations

import itertools
import string
from collections.abc import Callable, Iterable, Iterator, Sequence

from redfox.errors import InputError

from .models import CandidateOrder, CredentialPair

CHARSETS: dict[str, str] = {
    "digits": string.digits,
    "lower": string.ascii_lowercase,
    "upper": string.ascii_uppercase,
    "alpha": string.ascii_letters,
    "alnum": string.ascii_lowercase + string.ascii_uppercase + string.digits,
    "hex": "0123456789abcdef",
    "symbols": "!@#$%^&*-_+=?.",
}

DEFAULT_SUFFIXES: tuple[str, ...] = ("1", "12", "123", "1234", "!", "@", "2024", "2025")


def resolve_charset(value: str) -> str:
    """Turn ``digits+lower`` style names (or literal characters) into a charset."""
    value = (value or "").strip()
    if not value:
        raise InputError("Charset must not be empty")
    parts = value.split("+")
    if all(part in CHARSETS for part in parts):
        chars = "".join(CHARSETS[part] for part in parts)
    else:
        chars = value
    ordered = "".join(dict.fromkeys(chars))
    return ordered


def brute_force_passwords(charset: str, min_length: int, max_length: int) -> Iterator[str]:
    """Enumerate every string over ``charset``, shortest first."""
    if min_length < 0 or max_length < min_length:
        raise InputError(f"Invalid length range {min_length}..{max_length}")
    for length in range(min_length, max_length + 1):
        for combo in itertools.product(charset, repeat=length):
            yield "".join(combo)


def count_brute_force(charset: str, min_length: int, max_length: int) -> int:
    return sum(len(charset) ** length for length in range(min_length, max_length + 1))


def mutate(word: str, suffixes: Sequence[str] = DEFAULT_SUFFIXES) -> list[str]:
    """Hybrid mutations of one dictionary word."""
    bases = list(dict.fromkeys([word, word.capitalize(), word.upper()]))
    variants = list(bases)
    for suffix in suffixes:
        variants.extend(base + suffix for base in bases)
    return list(dict.fromkeys(variants))


def hybrid_passwords(words: Iterable[str], suffixes: Sequence[str] = DEFAULT_SUFFIXES) -> Iterator[str]:
    for word in words:
        yield from mutate(word, suffixes)


def combine(
    users: Sequence[str],
    passwords: Callable[[], Iterable[str]],
    order: CandidateOrder,
    provenance: str,
) -> Iterator[CredentialPair]:
    """Combine users with a re-iterable password stream.

    ``passwords`` is a factory so user-first order can restart the stream
    for each user without materialising it.
    """
    if order is CandidateOrder.USER_FIRST:
        for username in users:
            for password in passwords():
                yield CredentialPair(username, password, provenance)
    elif order is CandidateOrder.PASSWORD_FIRST:
        for password in passwords():
            for username in users:
                yield CredentialPair(username, password, provenance)
    else:
        for username, password in zip(users, passwords()):
            yield CredentialPair(username, password, provenance)


def dictionary_pairs(
    users: Sequence[str],
    passwords: Sequence[str],
    order: CandidateOrder = CandidateOrder.USER_FIRST,
    provenance: str = "dictionary",
) -> Iterator[CredentialPair]:
    return combine(users, lambda: passwords, order, provenance)


def brute_force_pairs(
    users: Sequence[str],
    charset: str,
    min_length: int,
    max_length: int,
    order: CandidateOrder = CandidateOrder.USER_FIRST,
) -> Iterator[CredentialPair]:
    provenance = f"brute-force[{len(charset)} chars, {min_length}-{max_length}]"
    return combine(
        users,
        lambda: brute_force_passwords(charset, min_length, max_length),
        order,
        provenance,
    )


def hybrid_pairs(
    users: Sequence[str],
    words: Sequence[str],
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
    order: CandidateOrder = CandidateOrder.USER_FIRST,
    provenance: str = "hybrid",
) -> Iterator[CredentialPair]:
    return combine(users, lambda: hybrid_passwords(words, suffixes), order, provenance)


def stuffing_pairs(
    combos: Iterable[tuple[str, str]], provenance: str = "credential-stuffing"
) -> Iterator[CredentialPair]:
    for username, password in combos:
        yield CredentialPair(username, password, provenance)


def generate_wordlist(
    size: int,
    base_words: Sequence[str] = (),
    charset: str = "digits",
    min_length: int = 1,
    max_length: int = 4,
    suffixes: Sequence[str] = DEFAULT_SUFFIXES,
) -> list[str]:
    """Up to ``size`` unique words: mutations of ``base_words`` or brute-force strings."""
    if size < 1:
        raise InputError("Wordlist size must be at least 1")
    if base_words:
        words: Iterable[str] = hybrid_passwords(base_words, suffixes)
    else:
        words = brute_force_passwords(resolve_charset(charset), min_length, max_length)
    return list(itertools.islice(dict.fromkeys(words), size))
