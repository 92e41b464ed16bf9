"""Built-in default credentials, usable as ``@default-*`` wordlist names."""

from __future__ import annotations

# Common default credentials (username, password)
DEFAULT_CREDENTIALS: list[tuple[str, str]] = [
    ("root", ""),
    ("root", "root"),
    ("root", "password"),
    ("root", "toor"),
    ("admin", ""),
    ("admin", "admin"),
    ("admin", "password"),
    ("admin", "12345"),
    ("administrator", "password"),
    ("test", "test"),
    ("guest", "guest"),
    ("user", "user"),
]

DEFAULT_USERNAMES: tuple[str, ...] = (
    "admin",
    "administrator",
    "root",
    "user",
    "test",
    "guest",
)

DEFAULT_PASSWORDS: tuple[str, ...] = (
    "password",
    "admin",
    "123456",
    "12345",
    "toor",
    "root",
    "test",
    "guest",
    "changeme",
    "welcome",
    "letmein",
    "qwerty",
)

BUILTIN_WORDLISTS: dict[str, tuple[str, ...]] = {
    "@default-users": DEFAULT_USERNAMES,
    "@default-passwords": DEFAULT_PASSWORDS,
}

BUILTIN_COMBOS: dict[str, list[tuple[str, str]]] = {
    "@default-credentials": DEFAULT_CREDENTIALS,
}
