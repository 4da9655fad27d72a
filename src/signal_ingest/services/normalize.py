"""Deterministic matching keys: slugs, website domains and column headers."""

from __future__ import annotations

import re

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")
_NON_HEADER_RUN = re.compile(r"[^a-z0-9]+")
_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*://")


def slugify(text: str | None) -> str:
    """Lowercase and collapse every run of non ``[a-z0-9]`` characters to one hyphen.

    Empty or all-symbol input yields ``""``; callers treat that as invalid.
    """
    if not text:
        return ""
    return _NON_SLUG_RUN.sub("-", text.lower()).strip("-")


def normalize_website(url: str | None) -> str:
    """Reduce a URL-ish string to its bare lowercase host.

    ``https://www.Acme.com/about``, ``http://acme.com`` and ``acme.com`` all
    normalize to ``acme.com``.
    """
    if not url:
        return ""
    value = url.strip().lower()
    value = _SCHEME.sub("", value)
    value = value.removeprefix("//")
    for sep in ("/", "?", "#"):
        value = value.split(sep, 1)[0]
    # credentials
    value = value.rsplit("@", 1)[-1]
    value = value.removeprefix("www.")
    return value.rstrip(".")


def ensure_scheme(url: str) -> str:
    """Prefix ``https://`` onto bare domains, leave full URLs untouched."""
    url = url.strip()
    if not url or _SCHEME.match(url.lower()):
        return url
    return f"https://{url}"


def normalize_header(header: str | None) -> str:
    """Turn a free-form column header into a snake_case key."""
    if not header:
        return ""
    return _NON_HEADER_RUN.sub("_", header.strip().lower()).strip("_")


def normalize_label(label: str | None) -> str:
    """Case- and whitespace-insensitive key for names and taxonomy labels."""
    if not label:
        return ""
    return " ".join(label.split()).lower()
