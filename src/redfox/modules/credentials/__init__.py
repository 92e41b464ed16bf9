"""Credential candidates: wordlists, generators and the resumable source."""

from .generators import CHARSETS, DEFAULT_SUFFIXES, generate_wordlist, mutate, resolve_charset
from .models import AttackMode, CandidateOrder, CredentialPair
from .source import CredentialSource
from .wordlists import list_available, load_combos, load_wordlist

__all__ = [
    "AttackMode",
    "CHARSETS",
    "CandidateOrder",
    "CredentialPair",
    "CredentialSource",
    "DEFAULT_SUFFIXES",
    "generate_wordlist",
    "list_available",
    "load_combos",
    "load_wordlist",
    "mutate",
    "resolve_charset",
]
