"""
Credential injection and redaction for clone URLs.

Tokens are embedded into HTTPS clone URLs only through ``inject_credential``
and every URL that may carry one goes through ``redact_url`` (or, for free
text such as captured ``git`` output, ``redact_text``) before it is printed
or logged.
"""
from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlsplit, urlunsplit

REDACTED = "***"
TOKEN_USER = "oauth2"
_TOKEN_SCHEMES = {"http", "https"}

# scheme://userinfo@ inside arbitrary text; userinfo stops at whitespace, quotes and path separators
_URL_USERINFO = re.compile(r"(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://(?P<userinfo>[^\s/@'\"<>]+)@")


def inject_credential(url: str, token: str, user: str = TOKEN_USER) -> str:
    """Return ``url`` with ``user:token`` placed in its user-info segment."""
    if not token:
        return url
    parts = urlsplit(url)
    if parts.scheme not in _TOKEN_SCHEMES:
        return url
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(parts._replace(netloc=f"{user}:{token}@{host}"))


def _mask_userinfo(scheme: str, userinfo: str) -> str:
    if ":" in userinfo:
        return f"{userinfo.split(':', 1)[0]}:{REDACTED}"
    # a lone user over HTTP(S) is how tokens are passed without a password
    if scheme.lower() in _TOKEN_SCHEMES:
        return REDACTED
    return userinfo


def redact_url(url: str) -> str:
    """
    Mask the secret part of a URL's user-info with ``***``.

    ``user:password@`` keeps the user name; a bare ``token@`` on an HTTP(S)
    URL is masked entirely. SSH-style user names (``ssh://git@host``) are
    left alone.
    """
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    userinfo, host = parts.netloc.rsplit("@", 1)
    masked = _mask_userinfo(parts.scheme, userinfo)
    if masked == userinfo:
        return url
    return urlunsplit(parts._replace(netloc=f"{masked}@{host}"))


def redact_text(text: str) -> str:
    """Apply the ``redact_url`` rule to every credentialed URL found in ``text``."""
    if not text or "@" not in text:
        return text

    def _replace(match: re.Match) -> str:
        scheme = match.group("scheme")
        return f"{scheme}://{_mask_userinfo(scheme, match.group('userinfo'))}@"

    return _URL_USERINFO.sub(_replace, text)


def redact_args(args: Iterable[str]) -> list[str]:
    """Redact every argument of a command line that looks like a credentialed URL."""
    return [redact_url(arg) if "://" in arg else arg for arg in args]
