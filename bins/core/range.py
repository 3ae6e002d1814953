"""
Range selection for multi-file pastes.

A selector such as ``0,2-4,-1`` is parsed up front, without knowing how
many files a paste has, and resolved later once a bin reports the count.
Negative numbers count from the end: ``-1`` is the last file.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .exceptions import ParseError, UsageError

_SPAN = re.compile(r'(-?\d+)(?:-(-?\d+))?')


@dataclass(frozen=True)
class IndexSpan:
    """
    One comma-separated piece of a selector.

    Attributes:
        start: First index (negative counts from the end)
        end: Last index, inclusive; ``None`` for a single index
    """
    start: int
    end: Optional[int] = None

    @staticmethod
    def _resolve_one(index: int, count: int) -> int:
        resolved = count + index if index < 0 else index
        if not 0 <= resolved < count:
            raise UsageError(f"index {index} is out of bounds for a paste with {count} file{'' if count == 1 else 's'}")
        return resolved

    def resolve(self, count: int) -> List[int]:
        """
        Resolve against a known file count.

        Raises:
            UsageError: If an endpoint is out of bounds or the span is reversed
        """
        start = self._resolve_one(self.start, count)
        if self.end is None:
            return [start]
        end = self._resolve_one(self.end, count)
        if end < start:
            raise UsageError(f"range {self} ends (at {end}) before it starts (at {start})")
        return list(range(start, end + 1))

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class RangeSelector:
    """Ordered list of index spans parsed from a selector expression."""
    spans: Tuple[IndexSpan, ...]

    @classmethod
    def parse(cls, text: str) -> 'RangeSelector':
        """
        Parse a comma-separated selector.

        Args:
            text: Expression like ``1``, ``2-4``, ``-2--1`` or ``0,3-5,-1``

        Raises:
            ParseError: On empty pieces, non-numeric pieces or spans with
                more than two numbers
        """
        spans = []
        for piece in text.split(','):
            piece = piece.strip()
            if not piece:
                raise ParseError("error parsing range", causes=[f"empty range in {text!r}"])
            match = _SPAN.fullmatch(piece)
            if match is None:
                raise ParseError("error parsing range", causes=[f"invalid range {piece!r}"])
            start, end = match.groups()
            spans.append(IndexSpan(int(start), None if end is None else int(end)))
        return cls(tuple(spans))

    def resolve(self, count: int) -> List[int]:
        """
        Resolve every span against ``count`` files.

        Returns:
            Sorted, de-duplicated zero-based indices
        """
        indices = set()
        for span in self.spans:
            indices.update(span.resolve(count))
        return sorted(indices)

    def __str__(self) -> str:
        return ','.join(str(span) for span in self.spans)
