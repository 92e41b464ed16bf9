"""Login form discovery for form-based authentication."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urljoin

USERNAME_PATTERNS = ["user", "login", "email", "name"]
PASSWORD_PATTERNS = ["pass", "pwd"]


@dataclass(frozen=True, slots=True)
class LoginForm:
    """Fields needed to submit a login form."""

    action: str
    username_field: str
    password_field: str
    hidden_fields: dict[str, str] = field(default_factory=dict)


def extract_attr(tag_html: str, attr_name: str) -> str | None:
    """Extract one HTML attribute value from a tag."""
    match = re.search(rf'\b{attr_name}=["\']([^"\']*)["\']', tag_html, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return None


def select_login_form(html: str) -> str | None:
    """Return a login form, preferring one with a password field."""
    forms = re.findall(r"<form[^>]*>.*?</form>", html, re.DOTALL | re.IGNORECASE)
    for candidate in forms:
        if re.search(r'type=["\']password["\']', candidate, re.IGNORECASE):
            return candidate
    return forms[0] if forms else None


def resolve_form_action(url: str, form_html: str) -> str:
    """Resolve the form action to an absolute URL."""
    open_tag = re.match(r"<form[^>]*>", form_html, re.IGNORECASE)
    action = extract_attr(open_tag.group(0), "action") if open_tag else None
    if not action:
        return url
    return urljoin(url, action)


def _input_tags(form_html: str) -> list[str]:
    return re.findall(r"<input\b[^>]*>", form_html, re.IGNORECASE)


def find_password_field(form_html: str) -> str:
    for tag in _input_tags(form_html):
        if (extract_attr(tag, "type") or "").lower() == "password":
            return extract_attr(tag, "name") or ""
    return _find_by_pattern(form_html, PASSWORD_PATTERNS)


def find_username_field(form_html: str, password_field: str = "") -> str:
    for pattern in USERNAME_PATTERNS:
        for tag in _input_tags(form_html):
            name = extract_attr(tag, "name") or ""
            field_type = (extract_attr(tag, "type") or "text").lower()
            if not name or name == password_field or field_type in {"hidden", "submit", "password"}:
                continue
            if pattern in name.lower():
                return name
    return ""


def _find_by_pattern(form_html: str, patterns: list[str]) -> str:
    for pattern in patterns:
        match = re.search(
            rf'<input[^>]*name=["\']([^"\']*{pattern}[^"\']*)["\']',
            form_html,
            re.IGNORECASE,
        )
        if match:
            return match.group(1)
    return ""


def extract_hidden_fields(form_html: str) -> dict[str, str]:
    """Hidden inputs (CSRF tokens and the like) with their default values."""
    fields: dict[str, str] = {}
    for tag in _input_tags(form_html):
        if (extract_attr(tag, "type") or "").lower() != "hidden":
            continue
        name = extract_attr(tag, "name")
        if name:
            fields[name] = extract_attr(tag, "value") or ""
    return fields


def discover_login_form(html: str, page_url: str) -> LoginForm | None:
    """Find the login form on a page and work out its field names."""
    form_html = select_login_form(html)
    if not form_html:
        return None
    password_field = find_password_field(form_html)
    username_field = find_username_field(form_html, password_field)
    if not password_field or not username_field:
        return None
    return LoginForm(
        action=resolve_form_action(page_url, form_html),
        username_field=username_field,
        password_field=password_field,
        hidden_fields=extract_hidden_fields(form_html),
    )
