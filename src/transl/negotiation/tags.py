"""
Language tag parsing with a process-lifetime memo.

Codes are parsed with Babel (``babel.core.parse_locale``) and completed with
the CLDR likely-subtags table shipped with Babel, so that ``en`` and
``en-Latn-US`` compare as the same language for negotiation purposes.

Parsing never fails: a stored code that Babel rejects still resolves to a
best-effort tag so that one bad code does not abort the other fields.
"""

import re
import threading
from dataclasses import dataclass
from functools import lru_cache

import structlog
from babel.core import get_global, parse_locale

logger = structlog.get_logger()

UNDETERMINED = "und"

_LEADING_ALPHA = re.compile(r"[A-Za-z]+")


@dataclass(frozen=True)
class Tag:
    """Structured language identifier.

    Attributes:
        code: Raw code the tag was parsed from (used to index tables)
        language: Lowercase language subtag ("und" when unknown)
        script: Title-case script subtag, if given
        territory: Uppercase region subtag, if given
        variant: Uppercase variant subtag, if given
    """

    code: str
    language: str
    script: str | None = None
    territory: str | None = None
    variant: str | None = None

    @property
    def is_undetermined(self) -> bool:
        return self.language == UNDETERMINED

    def maximized(self) -> tuple[str, str | None, str | None]:
        """Return (language, script, territory) filled from likely subtags."""
        return _maximize(self.language, self.script, self.territory)

    def __str__(self) -> str:
        parts = [self.language]
        for part in (self.script, self.territory, self.variant):
            if part:
                parts.append(part)
        return "-".join(parts)


@lru_cache(maxsize=None)
def _maximize(
    language: str, script: str | None, territory: str | None
) -> tuple[str, str | None, str | None]:
    if language == UNDETERMINED:
        return (UNDETERMINED, script, territory)

    likely = get_global("likely_subtags")
    candidates = []
    if script and territory:
        candidates.append(f"{language}_{script}_{territory}")
    if territory:
        candidates.append(f"{language}_{territory}")
        # "und_TW" -> "zh_Hant_TW": only usable when the language agrees
        candidates.append(f"{UNDETERMINED}_{territory}")
    if script:
        candidates.append(f"{language}_{script}")
    candidates.append(language)

    for key in candidates:
        value = likely.get(key)
        if not value:
            continue
        try:
            likely_language, likely_territory, likely_script, _ = parse_locale(value)[:4]
        except ValueError:
            continue
        if key.startswith(f"{UNDETERMINED}_") and likely_language != language:
            continue
        return (language, script or likely_script, territory or likely_territory)

    return (language, script, territory)


def parse_tag(code: str) -> Tag:
    """Parse a code into a Tag without caching.

    Accepts both "-" and "_" separators. Encoding suffixes ("en_US.UTF-8")
    and modifiers ("de_DE@euro") are dropped by Babel.
    """
    normalized = code.strip().replace("-", "_")
    try:
        lang, territory, script, variant = parse_locale(normalized)[:4]
    except ValueError:
        return _best_effort(code)

    if lang == "root":
        lang = UNDETERMINED
    return Tag(code=code, language=lang, script=script, territory=territory, variant=variant)


def _best_effort(code: str) -> Tag:
    match = _LEADING_ALPHA.match(code.strip())
    lang = match.group(0).lower() if match else UNDETERMINED
    logger.debug("tag_resolver.malformed_code", code=code, language=lang)
    return Tag(code=code, language=lang)


class TagResolver:
    """Memoizing code -> Tag resolver.

    Entries live for the lifetime of the resolver. Reads do not lock; a
    miss parses outside the lock and publishes the first result stored, so
    concurrent misses for the same code return equal tags.
    """

    def __init__(self) -> None:
        self._tags: dict[str, Tag] = {}
        self._lock = threading.Lock()

    def resolve(self, code: str) -> Tag:
        tag = self._tags.get(code)
        if tag is not None:
            return tag

        tag = parse_tag(code)
        with self._lock:
            return self._tags.setdefault(code, tag)

    def stats(self) -> dict[str, int]:
        return {"entries": len(self._tags)}

    def clear(self) -> None:
        """Drop every memoized tag (for testing)."""
        with self._lock:
            self._tags.clear()

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"<TagResolver({len(self._tags)} tags)>"


_default_resolver = TagResolver()


def get_resolver() -> TagResolver:
    """Return the process-wide resolver."""
    return _default_resolver


def resolve_tag(code: str) -> Tag:
    """Resolve a code with the process-wide resolver."""
    return _default_resolver.resolve(code)
