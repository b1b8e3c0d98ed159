"""
Request-scoped preferred languages.

The Translator reads the caller's preferences from a context variable when
none are passed explicitly. Web integrations set it once per request:

    token = set_preferred_languages(parse_accept_language(header))
    try:
        ...
    finally:
        reset_preferred_languages(token)

or, equivalently, ``with preferred_languages([...]):``.
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Iterator, Sequence

from ..negotiation.tags import Tag

PreferenceList = Sequence[Tag | str]

_preferred: ContextVar[tuple[Tag | str, ...] | None] = ContextVar(
    "transl_preferred_languages", default=None
)


def set_preferred_languages(languages: PreferenceList) -> Token:
    """Set the preferred languages for the current context."""
    return _preferred.set(tuple(languages))


def reset_preferred_languages(token: Token) -> None:
    _preferred.reset(token)


def get_preferred_languages() -> list[Tag | str]:
    """Return the current context's preferences ([] when unset)."""
    value = _preferred.get()
    return list(value) if value else []


@contextmanager
def preferred_languages(languages: PreferenceList) -> Iterator[None]:
    """Temporarily set preferred languages for the enclosed block."""
    token = set_preferred_languages(languages)
    try:
        yield
    finally:
        _preferred.reset(token)


def parse_accept_language(header: str | None) -> list[str]:
    """Parse an HTTP Accept-Language header into ordered language codes.

    Entries are sorted by descending q value, keeping header order for equal
    weights. Wildcards, q=0 entries and unparseable weights are dropped.

    Example:
        >>> parse_accept_language("ru-RU,ru;q=0.9,en;q=0.8,*;q=0.5")
        ['ru-RU', 'ru', 'en']
    """
    if not header:
        return []

    weighted: list[tuple[float, int, str]] = []
    for position, item in enumerate(header.split(",")):
        code, _, params = item.strip().partition(";")
        code = code.strip()
        if not code or code == "*":
            continue

        quality = 1.0
        for param in params.split(";"):
            name, _, value = param.strip().partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality <= 0:
            continue
        weighted.append((-quality, position, code))

    return [code for _, _, code in sorted(weighted)]
