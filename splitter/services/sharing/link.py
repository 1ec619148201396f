"""Helpers for carrying a share token in a URL query parameter."""

from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

DEFAULT_TOKEN_PARAM = "token"


def _query_without(query: str, param: str) -> list[tuple[str, str]]:
    return [
        (name, value)
        for name, value in parse_qsl(query, keep_blank_values=True)
        if name != param
    ]


def build_share_link(
    base_url: str,
    token: str,
    param: str = DEFAULT_TOKEN_PARAM,
) -> str:
    """
    Append the token to `base_url`, replacing any token already there.

    Other query parameters and the fragment are kept.
    """
    parts = urlsplit(base_url)
    query = _query_without(parts.query, param)
    query.append((param, token))
    return urlunsplit(parts._replace(query=urlencode(query)))


def extract_token(url: str, param: str = DEFAULT_TOKEN_PARAM) -> Optional[str]:
    """Token carried by `url`, or None if absent or blank."""
    for name, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if name == param and value.strip():
            return value
    return None

