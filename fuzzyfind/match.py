"""Fuzzy matching and scoring of a query against candidate strings."""

from __future__ import annotations

import math
import string
from collections.abc import Iterator

SCORE_GAP_LEADING = -0.005
SCORE_GAP_TRAILING = -0.005
SCORE_GAP_INNER = -0.01
SCORE_MATCH_CONSECUTIVE = 1.0
SCORE_MATCH_SLASH = 0.9
SCORE_MATCH_WORD = 0.8
SCORE_MATCH_CAPITAL = 0.7
SCORE_MATCH_DOT = 0.6

SCORE_MAX = math.inf
SCORE_MIN = -math.inf

MATCH_MAX_LEN = 1024

_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)

_BOUNDARY_BONUS = {
    "/": SCORE_MATCH_SLASH,
    "-": SCORE_MATCH_WORD,
    "_": SCORE_MATCH_WORD,
    " ": SCORE_MATCH_WORD,
    ".": SCORE_MATCH_DOT,
}

_LOWER_CHARS = frozenset(string.ascii_lowercase)
_UPPER_CHARS = frozenset(string.ascii_uppercase)
_WORD_CHARS = _LOWER_CHARS | frozenset(string.digits)


def _bonus(last_ch: str, ch: str) -> float:
    """Bonus for matching ``ch`` when it follows ``last_ch``."""
    if ch in _UPPER_CHARS:
        if last_ch in _LOWER_CHARS:
            return SCORE_MATCH_CAPITAL
        return _BOUNDARY_BONUS.get(last_ch, 0.0)
    if ch in _WORD_CHARS:
        return _BOUNDARY_BONUS.get(last_ch, 0.0)
    return 0.0


def _bonuses(haystack: str) -> list[float]:
    return [_bonus(last, ch) for last, ch in zip("/" + haystack, haystack)]


def has_match(needle: str, haystack: str) -> bool:
    """Return True if every character of ``needle`` occurs in order in ``haystack``.

    A lower-case needle character also matches its upper-case form.
    """
    pos = 0
    for nch in needle:
        hits = [
            found
            for found in (haystack.find(c, pos) for c in {nch, nch.translate(_UPPER)})
            if found >= 0
        ]
        if not hits:
            return False
        pos = min(hits) + 1
    return True


def _trivial_score(needle: str, haystack: str) -> float | None:
    """Score for cases that need no matrix, or None."""
    if not needle:
        return SCORE_MIN
    if len(haystack) > MATCH_MAX_LEN or len(needle) > len(haystack):
        return SCORE_MIN
    if len(needle) == len(haystack):
        return SCORE_MAX
    return None


def _match_row(
    nch: str,
    first: bool,
    last: bool,
    lower_haystack: str,
    bonus: list[float],
    last_d: list[float] | None,
    last_m: list[float] | None,
) -> tuple[list[float], list[float]]:
    gap_score = SCORE_GAP_TRAILING if last else SCORE_GAP_INNER
    prev_score = SCORE_MIN
    prev_d = prev_m = SCORE_MIN
    curr_d: list[float] = []
    curr_m: list[float] = []
    for j, (hch, match_bonus) in enumerate(zip(lower_haystack, bonus)):
        if nch == hch:
            if first:
                score = j * SCORE_GAP_LEADING + match_bonus
            elif j:
                score = max(prev_m + match_bonus, prev_d + SCORE_MATCH_CONSECUTIVE)
            else:
                score = SCORE_MIN
            curr_d.append(score)
            prev_score = max(score, prev_score + gap_score)
        else:
            curr_d.append(SCORE_MIN)
            prev_score = prev_score + gap_score
        curr_m.append(prev_score)
        if last_d is not None and last_m is not None:
            prev_d = last_d[j]
            prev_m = last_m[j]
    return curr_d, curr_m


def _rows(needle: str, haystack: str) -> Iterator[tuple[list[float], list[float]]]:
    """Yield the (D, M) score rows, one per needle character."""
    lower_needle = needle.translate(_LOWER)
    lower_haystack = haystack.translate(_LOWER)
    bonus = _bonuses(haystack)
    last_row = len(lower_needle) - 1
    last_d: list[float] | None = None
    last_m: list[float] | None = None
    for row, nch in enumerate(lower_needle):
        last_d, last_m = _match_row(
            nch, row == 0, row == last_row, lower_haystack, bonus, last_d, last_m
        )
        yield last_d, last_m


def match(needle: str, haystack: str) -> float:
    """Score ``haystack`` against ``needle``; higher is better.

    Only meaningful when ``has_match(needle, haystack)`` is true.
    """
    trivial = _trivial_score(needle, haystack)
    if trivial is not None:
        return trivial
    final_m: list[float] = []
    for _, final_m in _rows(needle, haystack):
        pass
    return final_m[-1]


def match_positions(needle: str, haystack: str) -> tuple[float, list[int]]:
    """Score ``haystack`` and return the positions of the matched characters.

    Returns ``(score, positions)``; positions is empty when no match path
    was computed.
    """
    trivial = _trivial_score(needle, haystack)
    if trivial is not None:
        if trivial == SCORE_MAX:
            return trivial, list(range(len(needle)))
        return trivial, []

    rows = list(_rows(needle, haystack))
    d_rows = [d for d, _ in rows]
    m_rows = [m for _, m in rows]

    positions: list[int | None] = [None] * len(needle)
    match_required = False
    j = len(haystack) - 1
    for i in reversed(range(len(needle))):
        while j >= 0:
            d_score = d_rows[i][j]
            if d_score != SCORE_MIN and (match_required or d_score == m_rows[i][j]):
                # A consecutive-match score means the previous character
                # must have matched too.
                match_required = bool(
                    i
                    and j
                    and m_rows[i][j] == d_rows[i - 1][j - 1] + SCORE_MATCH_CONSECUTIVE
                )
                positions[i] = j
                j -= 1
                break
            j -= 1

    score = m_rows[-1][-1]
    if any(p is None for p in positions):
        return score, []
    return score, [p for p in positions if p is not None]