"""
Fuzzy resolution of free-text exercise names against a library.

Names coming from AI-generated plans or user input rarely match the
library verbatim ("BB Bench", "rdl", "Seated DB Shoulder Press").
find_best_match() runs an ordered list of independent strategies and
returns the first hit:

  1. exact (case-insensitive) name
  2. containment either way, most specific candidate first
  3. shared words (tokens of 3+ characters)
  4. qualifier prefixes stripped, then 1-3
  5. synonym / abbreviation table, then 1-3
"""

import re
import string
from types import MappingProxyType
from typing import Callable, Final, Iterable, Mapping, Sequence

from .models import Exercise

Strategy = Callable[[str, Sequence[Exercise]], Exercise | None]

MIN_TOKEN_LENGTH: Final[int] = 3

QUALIFIER_PREFIXES: Final[tuple[str, ...]] = (
    "close grip",
    "close-grip",
    "wide grip",
    "wide-grip",
    "barbell",
    "dumbbell",
    "bb",
    "db",
    "ez bar",
    "ez",
    "cable",
    "machine",
    "seated",
    "standing",
    "incline",
    "decline",
    "flat",
    "romanian",
)

SYNONYMS: Final[Mapping[str, str]] = MappingProxyType({
    "ohp": "overhead press",
    "military press": "overhead press",
    "shoulder press": "overhead press",
    "rdl": "romanian deadlift",
    "sldl": "stiff leg deadlift",
    "chinup": "pull-up",
    "chin up": "pull-up",
    "chin-up": "pull-up",
    "pullup": "pull-up",
    "pull up": "pull-up",
    "lat pull": "lat pulldown",
    "chest press": "bench press",
    "flat bench": "bench press",
    "back squat": "squat",
    "bent over row": "barbell row",
    "pushup": "push-ups",
    "push up": "push-ups",
    "bss": "bulgarian split squat",
    "triceps": "tricep",
    "biceps": "bicep",
})

_SYNONYM_RE: Final[re.Pattern[str]] = re.compile(
    r"(?<![\w-])("
    + "|".join(re.escape(a) for a in sorted(SYNONYMS, key=len, reverse=True))
    + r")(?![\w-])"
)


def normalize(name: str) -> str:
    """Trim, lowercase, and drop trailing punctuation."""
    return name.strip().lower().rstrip(string.punctuation + " ")


def _tokens(text: str) -> set[str]:
    return {t for t in text.split() if len(t) >= MIN_TOKEN_LENGTH}


def match_exact(query: str, library: Sequence[Exercise]) -> Exercise | None:
    """Stage 1: case-insensitive name equality."""
    for exercise in library:
        if normalize(exercise.name) == query:
            return exercise
    return None


def match_containment(query: str, library: Sequence[Exercise]) -> Exercise | None:
    """
    Stage 2: either string contains the other.

    The candidate whose length is closest to the query wins; earlier
    library entries win ties.
    """
    best: Exercise | None = None
    best_diff: int | None = None
    for exercise in library:
        candidate = normalize(exercise.name)
        if not candidate:
            continue
        if candidate in query or query in candidate:
            diff = abs(len(candidate) - len(query))
            if best_diff is None or diff < best_diff:
                best, best_diff = exercise, diff
    return best


def match_word_overlap(query: str, library: Sequence[Exercise]) -> Exercise | None:
    """Stage 3: most shared words; earlier library entries win ties."""
    query_tokens = _tokens(query)
    if not query_tokens:
        return None
    best: Exercise | None = None
    best_score = 0
    for exercise in library:
        score = len(query_tokens & _tokens(normalize(exercise.name)))
        if score > best_score:
            best, best_score = exercise, score
    return best


DIRECT_STRATEGIES: Final[tuple[Strategy, ...]] = (
    match_exact,
    match_containment,
    match_word_overlap,
)


def _run_direct(query: str, library: Sequence[Exercise]) -> Exercise | None:
    for strategy in DIRECT_STRATEGIES:
        match = strategy(query, library)
        if match is not None:
            return match
    return None


def strip_qualifiers(query: str) -> str:
    """Remove leading qualifier words ("seated", "barbell", ...) repeatedly."""
    stripped = query
    changed = True
    while changed:
        changed = False
        for prefix in QUALIFIER_PREFIXES:
            if stripped.startswith(prefix + " "):
                stripped = stripped[len(prefix):].strip()
                changed = True
    return stripped


def apply_synonyms(query: str) -> str:
    """
    Rewrite known abbreviations and aliases.

    A whole-query synonym wins; otherwise aliases appearing as whole words
    are replaced in a single pass, longest alias first.
    """
    if query in SYNONYMS:
        return SYNONYMS[query]
    return _SYNONYM_RE.sub(lambda m: SYNONYMS[m.group(1)], query)


def match_stripped(query: str, library: Sequence[Exercise]) -> Exercise | None:
    """Stage 4: qualifier prefixes removed, then the direct stages."""
    stripped = strip_qualifiers(query)
    if not stripped or stripped == query:
        return None
    return _run_direct(stripped, library)


def match_synonym(query: str, library: Sequence[Exercise]) -> Exercise | None:
    """Stage 5: synonym rewrite, then the direct stages."""
    mapped = apply_synonyms(query)
    if not mapped or mapped == query:
        return None
    return _run_direct(mapped, library)


PIPELINE: Final[tuple[Strategy, ...]] = (*DIRECT_STRATEGIES, match_stripped, match_synonym)


def find_best_match(name: str, library: Sequence[Exercise]) -> Exercise | None:
    """
    Resolve a free-text exercise name to a library entry.

    Args:
        name: Exercise name as written by a user or generated plan
        library: Canonical exercises; order decides ties

    Returns:
        The matched Exercise, or None when no stage finds a candidate
    """
    query = normalize(name)
    if not query or not library:
        return None
    for strategy in PIPELINE:
        match = strategy(query, library)
        if match is not None:
            return match
    return None


def match_names(names: Iterable[str], library: Sequence[Exercise]) -> dict[str, Exercise | None]:
    """Resolve a batch of names; unmatched names map to None."""
    return {name: find_best_match(name, library) for name in names}
