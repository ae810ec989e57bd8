"""Cyclomatic complexity from a token stream.

Two interchangeable counting policies are provided:

* :class:`KeywordPolicy` (default) segments the file into functions and
  scores each as ``1 + decision points + logical operators``.
* :class:`ReturnCountPolicy` does not look for function boundaries at all.
  It treats every ``return`` as the end of a pseudo-function, so the file
  mean becomes ``1 + decision points / returns``. It is a rough proxy for
  code where signatures are hidden behind macros.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from dataclasses import dataclass, field

from .config import KEYWORD_POLICY, POLICY_NAMES, RETURN_POLICY
from .exceptions import InvalidConfigError, MalformedSegmentError
from .models import FunctionSpan
from .scanning.segmenter import segment
from .scanning.tokens import Token, TokenKind


@dataclass
class Scoring:
    """Functions found by a policy plus any segmentation problems."""

    functions: list[FunctionSpan] = field(default_factory=list)
    errors: list[MalformedSegmentError] = field(default_factory=list)
    decision_points: int = 0
    degraded: bool = False


class CountingPolicy(ABC):
    """Turns a file's tokens into scored functions."""

    name: str

    @abstractmethod
    def score(self, tokens: Sequence[Token]) -> Scoring:
        """Score a materialized token sequence."""


class KeywordPolicy(CountingPolicy):
    name = KEYWORD_POLICY

    def score(self, tokens: Sequence[Token]) -> Scoring:
        branches = _branch_offsets(tokens)
        segmentation = segment(tokens)
        functions = [
            FunctionSpan(
                name=seg.name,
                start_line=seg.start_line,
                end_line=seg.end_line,
                complexity=1 + _count_between(branches, seg.start_offset, seg.end_offset),
            )
            for seg in segmentation.segments
        ]
        return Scoring(
            functions=functions,
            errors=list(segmentation.errors),
            decision_points=len(branches),
            degraded=segmentation.degraded,
        )


class ReturnCountPolicy(CountingPolicy):
    name = RETURN_POLICY

    def score(self, tokens: Sequence[Token]) -> Scoring:
        branches = _branch_offsets(tokens)
        returns = [t for t in tokens if t.kind is TokenKind.RETURN]
        functions: list[FunctionSpan] = []

        start, start_line = 0, 1
        for index, ret in enumerate(returns, start=1):
            if index == len(returns):
                # Trailing code after the last return belongs to it.
                end, end_line = _tail_position(tokens, ret)
            else:
                end, end_line = ret.offset, ret.line
            functions.append(
                FunctionSpan(
                    name=f"<return {index}>",
                    start_line=start_line,
                    end_line=end_line,
                    complexity=1 + _count_between(branches, start, end),
                )
            )
            start, start_line = ret.offset + 1, ret.line

        return Scoring(functions=functions, decision_points=len(branches))


def _tail_position(tokens: Sequence[Token], last_return: Token) -> tuple[int, int]:
    """Offset and line of the last token at or after *last_return*."""
    tail = tokens[-1] if tokens else last_return
    if tail.offset < last_return.offset:
        tail = last_return
    return tail.offset, tail.line


POLICIES: dict[str, CountingPolicy] = {
    KEYWORD_POLICY: KeywordPolicy(),
    RETURN_POLICY: ReturnCountPolicy(),
}


def get_policy(name: str) -> CountingPolicy:
    """Look up a counting policy by name."""
    try:
        return POLICIES[name]
    except KeyError:
        raise InvalidConfigError("policy", name, f"expected one of {', '.join(POLICY_NAMES)}")


def _branch_offsets(tokens: Sequence[Token]) -> list[int]:
    return [t.offset for t in tokens if t.is_branch]


def _count_between(offsets: list[int], start: int, end: int) -> int:
    """Number of sorted *offsets* within ``[start, end]``."""
    return bisect_right(offsets, end) - bisect_left(offsets, start)
