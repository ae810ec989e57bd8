"""Lexical scanner for C and C++ sources.

This is a best-effort approximation, not a parser. The scanner works in two
steps:

1. :func:`mask_source` blanks out everything that must never be classified
   (comments, string/char literals, raw strings and preprocessor directive
   lines). Blanked characters become spaces and newlines are kept, so offsets
   and line numbers of the masked text match the original.
2. :func:`scan` walks the masked text with a single regex and yields tagged
   :class:`~cyclomap.scanning.tokens.Token` objects.

Unterminated block comments and raw strings swallow the rest of the file
instead of raising; an unterminated ordinary literal ends at its line end.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from typing import Optional

from .tokens import Token, TokenKind

DECISION_KEYWORDS = frozenset({"if", "for", "while", "switch", "case", "catch"})

# Words that may be followed by "(" but never name a function.
NON_FUNCTION_NAMES = frozenset(
    {
        "if",
        "for",
        "while",
        "switch",
        "case",
        "catch",
        "return",
        "else",
        "do",
        "sizeof",
        "alignof",
        "_Alignof",
        "alignas",
        "_Alignas",
        "decltype",
        "typeof",
        "__typeof__",
        "typeid",
        "defined",
        "static_assert",
        "_Static_assert",
        "_Generic",
        "new",
        "delete",
        "throw",
        "noexcept",
        "requires",
        "asm",
        "__asm__",
        "__attribute__",
        "__declspec",
        "co_await",
        "co_yield",
        "co_return",
    }
)

# Words allowed between a parameter list and the function body.
_TRAILER_WORDS = frozenset(
    {
        "const",
        "volatile",
        "noexcept",
        "override",
        "final",
        "throw",
        "mutable",
        "try",
        "__attribute__",
        "__declspec",
    }
)

_SPECIAL_RE = re.compile(
    r'(?P<raw>(?<![A-Za-z0-9_])(?:u8|[uUL])?R"(?P<delim>[^ ()\\\t\r\n]{0,16})\()'
    r"|(?P<line_comment>//)"
    r"|(?P<block_comment>/\*)"
    r'|(?P<string>")'
    r"|(?P<char>')"
    r"|(?P<directive>^[ \t]*\#)",
    re.MULTILINE,
)

# Ordinary literals stop at a raw newline; ``\`` continuations are escapes.
_QUOTED_BODY_RE = {
    '"': re.compile(r'(?:[^"\\\n]|\\.)*"', re.DOTALL),
    "'": re.compile(r"(?:[^'\\\n]|\\.)*'", re.DOTALL),
}

_DIRECTIVE_STOP_RE = re.compile(r"/\*|\n")
_NON_NEWLINE_RE = re.compile(r"[^\n]")

_TOKEN_RE = re.compile(
    r"(?P<logical>&&|\|\|)"
    r"|(?P<ternary>\?)"
    r"|(?P<name>(?<!\w)(?:~?[A-Za-z_]\w*\s*::\s*)*"
    r"(?:operator\s*(?:\(\s*\)|\[\s*\]|new\b|delete\b|[-+*/%^&|~!=<>,]+)|~?[A-Za-z_]\w*))"
    r"|(?P<open>\{)"
    r"|(?P<close>\})"
)

_SPACE_RE = re.compile(r"\s*")
_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_MACRO_RE = re.compile(r"[A-Z_][A-Z0-9_]*")
_PAREN_RE = re.compile(r"[()]")
_BRACE_RE = re.compile(r"[{}]")
_DELETED_RE = re.compile(r"=\s*(?:0|default|delete)\s*;")
_RETURN_TYPE_STOP_RE = re.compile(r"[{;=()]")
_INIT_NAME_RE = re.compile(
    r"(?:[A-Za-z_]\w*\s*(?:<[^;{}]*?>)?\s*::\s*)*[A-Za-z_]\w*\s*(?:<[^;{}]*?>)?"
)


def scan(text: str) -> Iterator[Token]:
    """Yield classified tokens for *text*, lazily and exactly once.

    Decision keywords, ``?``, ``&&``/``||``, ``return``, function signature
    candidates and braces are reported; everything else is skipped.
    """
    code = mask_source(text)
    line_starts = [0] + [m.end() for m in re.finditer("\n", code)]

    for match in _TOKEN_RE.finditer(code):
        group = match.lastgroup
        offset = match.start()
        line = bisect_right(line_starts, offset)

        if group == "logical":
            yield Token(TokenKind.LOGICAL, match.group(), offset, line)
        elif group == "ternary":
            yield Token(TokenKind.DECISION, "?", offset, line)
        elif group == "open":
            yield Token(TokenKind.OPEN_BRACE, "{", offset, line)
        elif group == "close":
            yield Token(TokenKind.CLOSE_BRACE, "}", offset, line)
        else:
            name = "".join(match.group().split())
            if name in DECISION_KEYWORDS:
                yield Token(TokenKind.DECISION, name, offset, line)
            elif name == "return":
                yield Token(TokenKind.RETURN, name, offset, line)
            else:
                signature = _signature(code, match.end(), name, offset, line)
                if signature is not None:
                    yield signature


def mask_source(text: str, comments_only: bool = False) -> str:
    """Blank out comments, literals and preprocessor directives.

    Args:
        text: Raw source text
        comments_only: Blank comments only; literals and directives are kept
            verbatim (used for counting code lines)

    Returns:
        Text of the same length with masked characters replaced by spaces
    """
    pieces: list[str] = []
    pos = 0
    n = len(text)

    while True:
        match = _SPECIAL_RE.search(text, pos)
        if match is None:
            pieces.append(text[pos:])
            break

        start = match.start()
        if match.group("raw") is not None:
            delim = match.group("delim")
            close = text.find(")" + delim + '"', match.end())
            end = n if close < 0 else close + len(delim) + 2
            blank = not comments_only
        elif match.group("line_comment") is not None:
            end = _line_end(text, start)
            blank = True
        elif match.group("block_comment") is not None:
            close = text.find("*/", start + 2)
            end = n if close < 0 else close + 2
            blank = True
        elif match.group("directive") is not None:
            if comments_only:
                pieces.append(text[pos : match.end()])
                pos = match.end()
                continue
            end = _directive_end(text, match.end())
            blank = True
        else:
            quote = match.group()
            if quote == "'" and _is_digit_separator(text, start):
                pieces.append(text[pos : start + 1])
                pos = start + 1
                continue
            body = _QUOTED_BODY_RE[quote].match(text, start + 1)
            end = body.end() if body else _line_end(text, start)
            blank = not comments_only

        pieces.append(text[pos:start])
        segment = text[start:end]
        pieces.append(_NON_NEWLINE_RE.sub(" ", segment) if blank else segment)
        pos = end

    return "".join(pieces)


def count_code_lines(text: str) -> int:
    """Count non-blank lines that are not entirely comments."""
    masked = mask_source(text, comments_only=True)
    return sum(1 for line in masked.splitlines() if line.strip())


def count_lines(text: str) -> int:
    """Count physical lines; a final line without newline still counts."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


# ── Masking helpers ────────────────────────────────────────────────


def _continued(text: str, newline: int) -> bool:
    """True if the line ending at *newline* ends with a backslash."""
    i = newline - 1
    if i >= 0 and text[i] == "\r":
        i -= 1
    return i >= 0 and text[i] == "\\"


def _line_end(text: str, start: int) -> int:
    pos = start
    while True:
        newline = text.find("\n", pos)
        if newline < 0:
            return len(text)
        if not _continued(text, newline):
            return newline
        pos = newline + 1


def _directive_end(text: str, start: int) -> int:
    pos = start
    while True:
        match = _DIRECTIVE_STOP_RE.search(text, pos)
        if match is None:
            return len(text)
        if match.group() == "/*":
            close = text.find("*/", match.end())
            if close < 0:
                return len(text)
            pos = close + 2
            continue
        if not _continued(text, match.start()):
            return match.start()
        pos = match.end()


def _is_digit_separator(text: str, quote: int) -> bool:
    """True for the quote in ``1'000'000`` or ``0xFF'FF``."""
    i = quote
    while i > 0 and (text[i - 1].isalnum() or text[i - 1] in "_.'"):
        i -= 1
    return i < quote and text[i].isdigit()


# ── Signature helpers ──────────────────────────────────────────────


def _signature(code: str, pos: int, name: str, offset: int, line: int) -> Optional[Token]:
    """Build a SIGNATURE token if ``name(...)`` is followed by a body or ``;``."""
    if name.rsplit("::", 1)[-1].lstrip("~") in NON_FUNCTION_NAMES:
        return None
    open_paren = _skip_space(code, pos)
    if open_paren >= len(code) or code[open_paren] != "(":
        return None
    close_paren = _match_pair(code, open_paren, _PAREN_RE)
    if close_paren is None:
        return None
    trailer = _parse_trailer(code, close_paren + 1)
    if trailer is None:
        return None
    end, has_body = trailer
    return Token(TokenKind.SIGNATURE, name, offset, line, body_offset=end if has_body else None)


def _skip_space(code: str, pos: int) -> int:
    return _SPACE_RE.match(code, pos).end()


def _match_pair(code: str, open_pos: int, pattern: re.Pattern[str]) -> Optional[int]:
    """Return the offset closing the bracket at *open_pos*, or None."""
    opener = code[open_pos]
    depth = 0
    for match in pattern.finditer(code, open_pos):
        if match.group() == opener:
            depth += 1
        else:
            depth -= 1
            if depth == 0:
                return match.start()
    return None


def _parse_trailer(code: str, pos: int) -> Optional[tuple[int, bool]]:
    """Walk qualifiers after a parameter list.

    Returns ``(offset, True)`` for the ``{`` opening a body, ``(offset,
    False)`` for the ``;`` ending a prototype, or None when the parameter
    list belongs to an expression.
    """
    n = len(code)
    while True:
        pos = _skip_space(code, pos)
        if pos >= n:
            return None
        char = code[pos]
        if char == "{":
            return pos, True
        if char == ";":
            return pos, False
        if char == "=":
            deleted = _DELETED_RE.match(code, pos)
            return (deleted.end() - 1, False) if deleted else None
        if code.startswith("->", pos):
            stop = _skip_return_type(code, pos + 2)
            if stop is None:
                return None
            pos = stop
            continue
        if char == ":" and not code.startswith("::", pos):
            body = _skip_initializers(code, pos + 1)
            return (body, True) if body is not None else None
        if char == "&":
            pos += 1
            continue
        if code.startswith("[[", pos):
            end = code.find("]]", pos + 2)
            if end < 0:
                return None
            pos = end + 2
            continue

        word = _WORD_RE.match(code, pos)
        if word is None:
            return None
        if word.group() not in _TRAILER_WORDS and not _MACRO_RE.fullmatch(word.group()):
            return None
        pos = _skip_space(code, word.end())
        if pos < n and code[pos] == "(":
            close = _match_pair(code, pos, _PAREN_RE)
            if close is None:
                return None
            pos = close + 1


def _skip_return_type(code: str, pos: int) -> Optional[int]:
    while True:
        stop = _RETURN_TYPE_STOP_RE.search(code, pos)
        if stop is None or stop.group() == ")":
            return None
        if stop.group() != "(":
            return stop.start()
        close = _match_pair(code, stop.start(), _PAREN_RE)
        if close is None:
            return None
        pos = close + 1


def _skip_initializers(code: str, pos: int) -> Optional[int]:
    """Skip a constructor initializer list; return the body's ``{`` offset."""
    n = len(code)
    while True:
        pos = _skip_space(code, pos)
        member = _INIT_NAME_RE.match(code, pos)
        if member is None:
            return None
        pos = _skip_space(code, member.end())
        if pos >= n or code[pos] not in "({":
            return None
        pattern = _PAREN_RE if code[pos] == "(" else _BRACE_RE
        close = _match_pair(code, pos, pattern)
        if close is None:
            return None
        pos = _skip_space(code, close + 1)
        if code.startswith("...", pos):
            pos = _skip_space(code, pos + 3)
        if pos < n and code[pos] == ",":
            pos += 1
            continue
        if pos < n and code[pos] == "{":
            return pos
        return None
