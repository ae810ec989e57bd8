"""Heuristic function segmentation over the scanner's token stream.

Each signature candidate with a body is matched to the ``{ ... }`` block the
scanner pointed at; the block ends at the brace that brings nesting back to
the depth of its opening brace. Candidates that fall inside a function that
was already delimited (calls followed by blocks, macros, local classes) are
ignored, so braces of control structures never start a function.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..exceptions import MalformedSegmentError
from ..logging_config import get_logger
from .tokens import Token, TokenKind

logger = get_logger(__name__)


@dataclass(frozen=True)
class Segment:
    """Approximate extent of one function definition.

    Attributes:
        name: Function name as written (may be qualified)
        start_line: Line of the signature (1-indexed)
        end_line: Line of the closing brace (1-indexed)
        start_offset: Offset of the signature name
        end_offset: Offset of the closing brace
    """

    name: str
    start_line: int
    end_line: int
    start_offset: int
    end_offset: int

    def contains(self, offset: int) -> bool:
        return self.start_offset <= offset <= self.end_offset


@dataclass
class Segmentation:
    """Result of segmenting one file.

    Attributes:
        segments: Delimited functions, in source order
        errors: One entry per candidate whose body never balanced
        candidates: Number of signature candidates that had a body
    """

    segments: list[Segment] = field(default_factory=list)
    errors: list[MalformedSegmentError] = field(default_factory=list)
    candidates: int = 0

    @property
    def degraded(self) -> bool:
        """True when bodies were seen but none could be delimited."""
        return self.candidates > 0 and not self.segments


def segment(tokens: Sequence[Token]) -> Segmentation:
    """Partition a materialized token sequence into function segments."""
    closing = _match_braces(tokens)
    result = Segmentation()
    claimed_until = -1

    for token in tokens:
        if token.kind is not TokenKind.SIGNATURE or not token.has_body:
            continue
        result.candidates += 1
        if token.offset <= claimed_until:
            continue

        close = closing.get(token.body_offset)
        if close is None:
            error = MalformedSegmentError(token.text, token.line)
            logger.debug(str(error))
            result.errors.append(error)
            continue

        result.segments.append(
            Segment(
                name=token.text,
                start_line=token.line,
                end_line=close.line,
                start_offset=token.offset,
                end_offset=close.offset,
            )
        )
        claimed_until = close.offset

    return result


def _match_braces(tokens: Sequence[Token]) -> dict[int, Token]:
    """Map each balanced ``{`` offset to its closing brace token.

    Stray closing braces are ignored; opening braces still open at the end
    of the file have no entry.
    """
    stack: list[int] = []
    closing: dict[int, Token] = {}
    for token in tokens:
        if token.kind is TokenKind.OPEN_BRACE:
            stack.append(token.offset)
        elif token.kind is TokenKind.CLOSE_BRACE and stack:
            closing[stack.pop()] = token
    return closing
