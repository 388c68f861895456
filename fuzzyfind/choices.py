"""A collection of candidate strings searched and ranked by a query."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import IO, AnyStr

from .match import has_match, match


@dataclass(frozen=True)
class ScoredResult:
    """A candidate that matched the last search, with its score."""

    score: float
    string: str


class Choices:
    """Candidate strings, the results of the last search and a selection cursor."""

    def __init__(self, workers: int = 0) -> None:
        self.worker_count = workers or os.cpu_count() or 1
        self.strings: list[str] = []
        self.results: list[ScoredResult] = []
        self.selection = 0

    def _reset_search(self) -> None:
        self.results = []
        self.selection = 0

    def __len__(self) -> int:
        return len(self.strings)

    def add(self, choice: str) -> None:
        """Add a candidate; any previous search results are discarded."""
        self._reset_search()
        self.strings.append(choice)

    def read(self, stream: IO[AnyStr], delimiter: str = "\n") -> None:
        """Read all of ``stream`` and add every non-empty delimited entry.

        Bytes are decoded as UTF-8, keeping undecodable bytes intact. With a
        delimiter other than NUL, everything from the first NUL on is ignored.
        """
        data = stream.read()
        text = (
            data.decode("utf-8", errors="surrogateescape")
            if isinstance(data, bytes)
            else data
        )
        if delimiter != "\0":
            text = text.partition("\0")[0]
        for entry in text.split(delimiter):
            if entry:
                self.add(entry)

    def search(self, query: str) -> None:
        """Find the candidates matching ``query`` and rank them best first.

        Candidates with equal scores keep the order in which they were added.
        """
        self._reset_search()
        scored = [
            (match(query, candidate), index, candidate)
            for index, candidate in enumerate(self.strings)
            if has_match(query, candidate)
        ]
        scored.sort(key=lambda item: (-item[0], item[1]))
        self.results = [ScoredResult(score, candidate) for score, _, candidate in scored]

    def available(self) -> int:
        """Number of results of the last search."""
        return len(self.results)

    def get(self, n: int) -> str | None:
        """The ``n``-th result, or None if there are not that many."""
        if 0 <= n < len(self.results):
            return self.results[n].string
        return None

    def score(self, n: int) -> float:
        """Score of the ``n``-th result."""
        if not 0 <= n < len(self.results):
            raise IndexError(f"no result at position {n}")
        return self.results[n].score

    def prev(self) -> None:
        """Move the selection up, wrapping to the last result."""
        if self.results:
            self.selection = (self.selection - 1) % len(self.results)

    def next(self) -> None:
        """Move the selection down, wrapping to the first result."""
        if self.results:
            self.selection = (self.selection + 1) % len(self.results)