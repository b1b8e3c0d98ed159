"""
Negotiation module - language tags, matchers and the negotiation engine.
"""

from .engine import NegotiationEngine
from .matcher import (
    AvailabilityKey,
    Confidence,
    MatcherCache,
    MatchResult,
    NegotiationMatcher,
    availability_key,
    confidence,
    get_matcher_cache,
)
from .tags import Tag, TagResolver, get_resolver, parse_tag, resolve_tag

__all__ = [
    "AvailabilityKey",
    "Confidence",
    "MatcherCache",
    "MatchResult",
    "NegotiationEngine",
    "NegotiationMatcher",
    "Tag",
    "TagResolver",
    "availability_key",
    "confidence",
    "get_matcher_cache",
    "get_resolver",
    "parse_tag",
    "resolve_tag",
]
