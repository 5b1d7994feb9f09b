"""Lexer for the transaction search language.

The grammar has four token kinds: the boolean operators ``AND``/``OR``/``NOT``
(case-insensitive), the two parentheses, and terms. A term is any maximal run
of characters that are neither whitespace nor parentheses; comparisons such
as ``amount>=20`` or ``description:coffee`` are single terms and are only
interpreted later by :mod:`spending_analysis.predicates`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

OPERATORS: frozenset[str] = frozenset({"AND", "OR", "NOT"})


class TokenKind(Enum):
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    TERM = "term"


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical token; operator tokens carry the upper-cased operator name."""

    kind: TokenKind
    text: str

    @property
    def is_operator(self) -> bool:
        return self.kind is TokenKind.OPERATOR


LPAREN = Token(TokenKind.LPAREN, "(")
RPAREN = Token(TokenKind.RPAREN, ")")


def _classify(run: str) -> Token:
    upper = run.upper()
    if upper in OPERATORS:
        return Token(TokenKind.OPERATOR, upper)
    return Token(TokenKind.TERM, run)


def tokenize(query: str) -> list[Token]:
    """Split ``query`` into tokens.

    Whitespace-only input yields an empty list.

    >>> [t.text for t in tokenize("(gas or coffee) AND amount>5")]
    ['(', 'gas', 'OR', 'coffee', ')', 'AND', 'amount>5']
    """

    tokens: list[Token] = []
    buf: list[str] = []

    def flush() -> None:
        if buf:
            tokens.append(_classify("".join(buf)))
            buf.clear()

    for ch in query:
        if ch.isspace():
            flush()
        elif ch == "(":
            flush()
            tokens.append(LPAREN)
        elif ch == ")":
            flush()
            tokens.append(RPAREN)
        else:
            buf.append(ch)
    flush()
    return tokens


__all__ = ["LPAREN", "OPERATORS", "RPAREN", "Token", "TokenKind", "tokenize"]
