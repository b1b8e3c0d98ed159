"""Tests for availability keys, NegotiationMatcher and MatcherCache."""

import threading

import pytest

from transl.negotiation.matcher import (
    Confidence,
    MatcherCache,
    NegotiationMatcher,
    availability_key,
    confidence,
)
from transl.negotiation.tags import TagResolver, parse_tag


def _matcher(*codes: str) -> NegotiationMatcher:
    return NegotiationMatcher([parse_tag(c) for c in codes])


def _prefs(*codes: str):
    return [parse_tag(c) for c in codes]


@pytest.fixture
def cache() -> MatcherCache:
    return MatcherCache(TagResolver())


# ── availability_key ────────────────────────────────────────────────────


class TestAvailabilityKey:
    def test_default_first_rest_sorted(self):
        assert availability_key(["ru", "de", "en"], "en") == ("en", "de", "ru")

    def test_order_independent(self):
        a = availability_key({"ru": "x", "en": "y", "fr": "z"}, "en")
        b = availability_key({"fr": "z", "en": "y", "ru": "x"}, "en")
        assert a == b

    def test_without_default(self):
        assert availability_key(["ru", "de"], "en") == ("de", "ru")

    def test_duplicates_collapse(self):
        assert availability_key(["ru", "ru", "en"], "en") == ("en", "ru")

    def test_empty(self):
        assert availability_key([], "en") == ()

    def test_no_cardinality_ceiling(self):
        codes = [f"l{i:02d}" for i in range(40)]
        key = availability_key(codes, "en")
        assert len(key) == 40

    def test_default_changes_key(self):
        assert availability_key(["en", "ru"], "en") != availability_key(["en", "ru"], "ru")


# ── confidence ──────────────────────────────────────────────────────────


class TestConfidence:
    def test_same_code_exact(self):
        assert confidence(parse_tag("en"), parse_tag("en")) is Confidence.EXACT

    def test_same_code_different_separator(self):
        assert confidence(parse_tag("pt_BR"), parse_tag("pt-br")) is Confidence.EXACT

    def test_maximized_equal_is_exact(self):
        assert confidence(parse_tag("en-US"), parse_tag("en")) is Confidence.EXACT

    def test_other_region_is_high(self):
        assert confidence(parse_tag("en-GB"), parse_tag("en")) is Confidence.HIGH

    def test_other_script_is_low(self):
        assert confidence(parse_tag("sr-Latn"), parse_tag("sr")) is Confidence.LOW

    def test_other_language_is_no(self):
        assert confidence(parse_tag("ja"), parse_tag("en")) is Confidence.NO

    def test_undetermined_never_matches(self):
        assert confidence(parse_tag("???"), parse_tag("en")) is Confidence.NO


# ── NegotiationMatcher ──────────────────────────────────────────────────


class TestNegotiationMatcher:
    def test_requires_candidates(self):
        with pytest.raises(ValueError):
            NegotiationMatcher([])

    def test_exact_first_preference(self):
        result = _matcher("en", "ru").match(_prefs("ru", "en"))
        assert result.tag.code == "ru"
        assert result.confidence is Confidence.EXACT
        assert result.index == 1

    def test_second_preference(self):
        result = _matcher("en", "ru").match(_prefs("ja", "ru"))
        assert result.tag.code == "ru"
        assert not result.is_fallback

    def test_fallback_is_first_candidate(self):
        result = _matcher("en", "ru").match(_prefs("ja", "pt"))
        assert result.tag.code == "en"
        assert result.is_fallback
        assert result.confidence is Confidence.NO

    def test_empty_preferences_fallback(self):
        assert _matcher("ru", "de").match([]).tag.code == "ru"

    def test_regional_preference_matches_base(self):
        result = _matcher("en", "ru").match(_prefs("en-US"))
        assert result.tag.code == "en"

    def test_exact_region_beats_base(self):
        result = _matcher("en", "en-GB", "ru").match(_prefs("en-GB"))
        assert result.tag.code == "en-GB"
        assert result.confidence is Confidence.EXACT

    def test_identical_code_beats_equivalent_default(self):
        # "en" and "en-US" expand to the same tag; the identical code wins
        result = _matcher("en", "en-US").match(_prefs("en-US"))
        assert result.tag.code == "en-US"
        assert result.index == 1
        assert result.confidence is Confidence.EXACT

    def test_identical_code_is_case_and_separator_insensitive(self):
        result = _matcher("en", "en-US").match(_prefs("EN_us"))
        assert result.tag.code == "en-US"

    def test_base_code_still_picks_base(self):
        assert _matcher("en", "en-US").match(_prefs("en")).tag.code == "en"

    def test_earlier_preference_wins_over_better_later_one(self):
        # fr-CA only has a regional-variant match, but it ranks above en
        result = _matcher("en", "fr").match(_prefs("fr-CA", "en"))
        assert result.tag.code == "fr"
        assert result.confidence is Confidence.HIGH

    def test_tie_goes_to_earlier_candidate(self):
        result = _matcher("en-AU", "en-GB").match(_prefs("en-NZ"))
        assert result.tag.code == "en-AU"

    def test_deterministic(self):
        m = _matcher("de", "ru")
        results = {m.match(_prefs("ja")).tag.code for _ in range(20)}
        assert results == {"de"}


# ── MatcherCache ────────────────────────────────────────────────────────


class TestMatcherCache:
    def test_miss_then_hit(self, cache):
        key = availability_key(["en", "ru"], "en")
        first = cache.matcher_for(key)
        second = cache.matcher_for(key)
        assert first is second
        assert cache.stats() == {"entries": 1, "hits": 1, "misses": 1}

    def test_insertion_order_does_not_duplicate(self, cache):
        cache.matcher_for(availability_key({"ru": "", "en": "", "de": ""}, "en"))
        cache.matcher_for(availability_key({"de": "", "en": "", "ru": ""}, "en"))
        stats = cache.stats()
        assert stats["entries"] == 1
        assert stats["misses"] == 1
        assert stats["hits"] == 1

    def test_default_is_fallback_candidate(self, cache):
        matcher = cache.matcher_for(availability_key(["ru", "en"], "en"))
        assert matcher.fallback.code == "en"

    def test_codes_resolved_through_resolver(self):
        resolver = TagResolver()
        cache = MatcherCache(resolver)
        cache.matcher_for(("en", "ru"))
        assert len(resolver) == 2

    def test_empty_cache_instance_is_used(self):
        resolver = TagResolver()
        assert MatcherCache(resolver).resolver is resolver

    def test_concurrent_counters(self, cache):
        key = ("de", "en")
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(50):
                cache.matcher_for(key)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = cache.stats()
        assert stats["entries"] == 1
        assert 1 <= stats["misses"] <= 8
        assert stats["hits"] + stats["misses"] <= 400

    def test_clear(self, cache):
        cache.matcher_for(("en",))
        cache.clear()
        assert cache.stats() == {"entries": 0, "hits": 0, "misses": 0}

    def test_concurrent_misses_share_one_matcher(self, cache):
        key = ("en", "fr", "ru")
        barrier = threading.Barrier(8)
        seen = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            m = cache.matcher_for(key)
            with lock:
                seen.append(m)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 1
        assert all(m is seen[0] for m in seen)
