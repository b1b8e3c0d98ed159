"""
NegotiationEngine - pick the language to expose for one availability set.

The engine never fails: with no usable preference it returns the matcher's
fallback candidate, which is the default language when available and
otherwise the first code of the canonical availability key.
"""

from typing import Iterable, Sequence

from .matcher import (
    MatcherCache,
    MatchResult,
    NegotiationMatcher,
    availability_key,
    get_matcher_cache,
)
from .tags import Tag

Preference = Tag | str


class NegotiationEngine:
    """Applies matchers from a MatcherCache to preference lists."""

    def __init__(self, matchers: MatcherCache | None = None) -> None:
        self.matchers = matchers if matchers is not None else get_matcher_cache()

    def to_tags(self, preferences: Iterable[Preference]) -> list[Tag]:
        """Normalize preferences given as Tags or raw codes to Tags."""
        resolver = self.matchers.resolver
        return [p if isinstance(p, Tag) else resolver.resolve(p) for p in preferences]

    def select(self, matcher: NegotiationMatcher, preferences: Sequence[Preference]) -> Tag:
        """Return the best candidate of ``matcher`` for ``preferences``."""
        return self.match(matcher, preferences).tag

    def match(self, matcher: NegotiationMatcher, preferences: Sequence[Preference]) -> MatchResult:
        """Like select() but returns the full MatchResult."""
        return matcher.match(self.to_tags(preferences))

    def negotiate(
        self,
        available: Iterable[str],
        preferences: Sequence[Preference],
        default_code: str,
    ) -> MatchResult | None:
        """Negotiate directly against a set of available language codes.

        Args:
            available: Language codes with data (any order)
            preferences: Preferred languages, highest priority first
            default_code: Default language used as the fallback anchor

        Returns:
            MatchResult, or None when ``available`` is empty
        """
        key = availability_key(available, default_code)
        if not key:
            return None
        return self.match(self.matchers.matcher_for(key), preferences)

    def __repr__(self) -> str:
        return f"<NegotiationEngine(matchers={self.matchers!r})>"
