"""Lexical scanning: token stream, masking and function segmentation."""

from .lexer import count_code_lines, count_lines, mask_source, scan
from .segmenter import Segment, Segmentation, segment
from .tokens import Token, TokenKind

__all__ = [
    "scan",
    "mask_source",
    "count_lines",
    "count_code_lines",
    "segment",
    "Segment",
    "Segmentation",
    "Token",
    "TokenKind",
]
