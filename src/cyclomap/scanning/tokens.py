"""Token model emitted by the lexical scanner.

The scanner never builds a syntax tree. Its whole output is a flat stream of
tagged tokens, so every heuristic downstream works on the same explicit
contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TokenKind(Enum):
    """Classification of a scanned token."""

    DECISION = "decision"  # if / for / while / switch / case / catch / ?
    LOGICAL = "logical"  # && / ||
    RETURN = "return"
    SIGNATURE = "signature"  # name(...) followed by a body or a ';'
    OPEN_BRACE = "open_brace"
    CLOSE_BRACE = "close_brace"


# Kinds that add one path each to a cyclomatic count.
BRANCH_KINDS = frozenset({TokenKind.DECISION, TokenKind.LOGICAL})


@dataclass(frozen=True)
class Token:
    """A classified token.

    Attributes:
        kind: Token classification
        text: Source text of the token (the function name for signatures)
        offset: Character offset in the source text
        line: 1-indexed line number
        body_offset: For signatures, offset of the ``{`` opening the body;
            None for prototypes and for every other kind
    """

    kind: TokenKind
    text: str
    offset: int
    line: int
    body_offset: Optional[int] = None

    @property
    def has_body(self) -> bool:
        return self.body_offset is not None

    @property
    def is_branch(self) -> bool:
        return self.kind in BRANCH_KINDS
