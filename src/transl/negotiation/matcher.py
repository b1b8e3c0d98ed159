"""
Negotiation matchers and their cache.

A NegotiationMatcher is built once per availability set (the distinct
language codes present for one translation key) and reused for every record
with the same shape. The cache key is canonical and order independent:

    availability_key({"ru", "en", "de"}, default_code="en")
    -> ("en", "de", "ru")

The default language comes first when present so that it is the matcher's
fallback candidate; the remaining codes are sorted.
"""

import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

import structlog

from .tags import Tag, TagResolver, get_resolver

AvailabilityKey = tuple[str, ...]


class Confidence(IntEnum):
    """How well a supported language satisfies a desired one."""

    NO = 0     # Different language; only reachable as the fallback
    LOW = 1    # Same language, different script
    HIGH = 2   # Same language and script, different region or variant
    EXACT = 3  # Same code, or same maximized language/script/region


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a negotiation.

    Attributes:
        tag: Chosen candidate (its ``code`` indexes the translation table)
        index: Position of the candidate in the matcher
        confidence: Confidence.NO when the fallback was used
    """

    tag: Tag
    index: int
    confidence: Confidence

    @property
    def is_fallback(self) -> bool:
        return self.confidence is Confidence.NO


def availability_key(codes: Iterable[str], default_code: str) -> AvailabilityKey:
    """Build the canonical cache key for a set of language codes.

    Args:
        codes: Language codes present for one key (any iteration order,
            duplicates allowed)
        default_code: Process or translator default language code

    Returns:
        Tuple with the default first (if present) and the rest sorted
    """
    unique = set(codes)
    if default_code in unique:
        unique.discard(default_code)
        return (default_code, *sorted(unique))
    return tuple(sorted(unique))


def _same_code(a: str, b: str) -> bool:
    return a.replace("_", "-").casefold() == b.replace("_", "-").casefold()


def confidence(desired: Tag, supported: Tag) -> Confidence:
    """Score how well ``supported`` satisfies ``desired``."""
    if _same_code(desired.code, supported.code):
        return Confidence.EXACT
    if desired.is_undetermined or supported.is_undetermined:
        return Confidence.NO

    d_lang, d_script, d_region = desired.maximized()
    s_lang, s_script, s_region = supported.maximized()

    if d_lang != s_lang:
        return Confidence.NO
    if d_script != s_script:
        return Confidence.LOW
    if d_region == s_region and desired.variant == supported.variant:
        return Confidence.EXACT
    return Confidence.HIGH


class NegotiationMatcher:
    """Immutable matcher over an ordered list of supported tags.

    The first candidate is the fallback returned when no preference can be
    satisfied.
    """

    def __init__(self, candidates: Sequence[Tag]) -> None:
        if not candidates:
            raise ValueError("NegotiationMatcher needs at least one candidate")
        self._candidates: tuple[Tag, ...] = tuple(candidates)

    @property
    def candidates(self) -> tuple[Tag, ...]:
        return self._candidates

    @property
    def fallback(self) -> Tag:
        return self._candidates[0]

    def match(self, preferences: Sequence[Tag]) -> MatchResult:
        """Pick the best candidate for an ordered preference list.

        Preferences are walked in priority order; the first one with any
        acceptable candidate wins. Within one preference an identical code
        wins outright, then the highest confidence, with ties going to the
        earlier candidate.
        """
        for desired in preferences:
            for index, candidate in enumerate(self._candidates):
                if _same_code(desired.code, candidate.code):
                    return MatchResult(candidate, index, Confidence.EXACT)

            best_index = -1
            best = Confidence.NO
            for index, candidate in enumerate(self._candidates):
                score = confidence(desired, candidate)
                if score > best:
                    best_index, best = index, score
                    if score is Confidence.EXACT:
                        break
            if best_index >= 0:
                return MatchResult(self._candidates[best_index], best_index, best)

        return MatchResult(self.fallback, 0, Confidence.NO)

    def __repr__(self) -> str:
        codes = ", ".join(tag.code for tag in self._candidates)
        return f"<NegotiationMatcher([{codes}])>"


class MatcherCache:
    """Process-lifetime cache of matchers keyed by availability key.

    Reads do not lock. On a miss the matcher is built outside the lock and
    published with setdefault, so concurrent misses for one key may build
    twice but every caller ends up with the stored instance. Misses are
    counted under the lock; hits are not, so the hit count is approximate
    under concurrent use.
    """

    def __init__(self, resolver: TagResolver | None = None) -> None:
        self._resolver = resolver if resolver is not None else get_resolver()
        self._matchers: dict[AvailabilityKey, NegotiationMatcher] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._log = structlog.get_logger(component="matcher_cache")

    @property
    def resolver(self) -> TagResolver:
        return self._resolver

    def matcher_for(self, key: AvailabilityKey) -> NegotiationMatcher:
        """Return the matcher for a canonical availability key.

        Args:
            key: Output of availability_key(); must not be empty

        Returns:
            Cached or freshly built NegotiationMatcher
        """
        matcher = self._matchers.get(key)
        if matcher is not None:
            self._hits += 1
            return matcher

        built = NegotiationMatcher([self._resolver.resolve(code) for code in key])
        with self._lock:
            self._misses += 1
            matcher = self._matchers.setdefault(key, built)
        self._log.debug("matcher_cache.miss", languages=list(key))
        return matcher

    def stats(self) -> dict[str, int]:
        """Return entry, hit and miss counters (hits are approximate)."""
        return {
            "entries": len(self._matchers),
            "hits": self._hits,
            "misses": self._misses,
        }

    def clear(self) -> None:
        """Drop every cached matcher and reset counters (for testing)."""
        with self._lock:
            self._matchers.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        return len(self._matchers)

    def __repr__(self) -> str:
        return f"<MatcherCache({len(self._matchers)} matchers)>"


_default_cache = MatcherCache()


def get_matcher_cache() -> MatcherCache:
    """Return the process-wide matcher cache."""
    return _default_cache
