"""Shunting-yard conversion of query tokens into a postfix program."""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from .errors import MismatchedParenthesesError
from .tokenizer import Token, TokenKind


class OperatorSpec(NamedTuple):
    precedence: int
    right_assoc: bool


OPERATOR_SPECS: dict[str, OperatorSpec] = {
    "NOT": OperatorSpec(3, True),
    "AND": OperatorSpec(2, False),
    "OR": OperatorSpec(1, False),
}

type PostfixProgram = tuple[Token, ...]


def _should_pop(incoming: OperatorSpec, top: OperatorSpec) -> bool:
    if incoming.right_assoc:
        return incoming.precedence < top.precedence
    return incoming.precedence <= top.precedence


def to_postfix(tokens: Iterable[Token]) -> PostfixProgram:
    """Reorder infix ``tokens`` into postfix, dropping parentheses.

    Raises :class:`MismatchedParenthesesError` for a ``)`` without an open
    ``(`` and for any ``(`` still open at the end of input. Operand/operator
    arity is not checked here; the evaluator reports such programs as
    invalid syntax.
    """

    output: list[Token] = []
    stack: list[Token] = []

    for tok in tokens:
        if tok.kind is TokenKind.LPAREN:
            stack.append(tok)
        elif tok.kind is TokenKind.RPAREN:
            while stack and stack[-1].kind is not TokenKind.LPAREN:
                output.append(stack.pop())
            if not stack:
                raise MismatchedParenthesesError()
            stack.pop()
        elif tok.kind is TokenKind.OPERATOR:
            op_spec = OPERATOR_SPECS[tok.text]
            while stack and stack[-1].kind is TokenKind.OPERATOR:
                if not _should_pop(op_spec, OPERATOR_SPECS[stack[-1].text]):
                    break
                output.append(stack.pop())
            stack.append(tok)
        else:
            output.append(tok)

    while stack:
        top = stack.pop()
        if top.kind is TokenKind.LPAREN:
            raise MismatchedParenthesesError()
        output.append(top)
    return tuple(output)


__all__ = ["OPERATOR_SPECS", "OperatorSpec", "PostfixProgram", "to_postfix"]
