"""Offset-based text replacement.

Edits are computed against the original text and applied in strictly
decreasing offset order, so no edit shifts the offsets of an edit still to
be applied.
"""

from dataclasses import dataclass
from typing import Iterable, List

from .errors import SpliceError


@dataclass(frozen=True)
class Splice:
    """Replace text[start:end] with replacement."""

    start: int
    end: int
    replacement: str


def apply_splices(text: str, splices: Iterable[Splice]) -> str:
    """Apply non-overlapping edits to text.

    Args:
        text: Original text the offsets refer to
        splices: Edits in any order

    Returns:
        The edited text

    Raises:
        SpliceError: If an edit is out of range or overlaps another

    Example:
        >>> apply_splices("a b c", [Splice(0, 1, "x"), Splice(4, 5, "z")])
        'x b z'
    """
    ordered: List[Splice] = sorted(splices, key=lambda s: (s.start, s.end), reverse=True)
    result = text
    boundary = len(text)
    for splice in ordered:
        if splice.start < 0 or splice.start > splice.end:
            raise SpliceError(f"Invalid range [{splice.start}, {splice.end})")
        if splice.end > boundary:
            raise SpliceError(
                f"Edit [{splice.start}, {splice.end}) overlaps a later edit or exceeds the text"
            )
        result = result[:splice.start] + splice.replacement + result[splice.end:]
        boundary = splice.start
    return result
