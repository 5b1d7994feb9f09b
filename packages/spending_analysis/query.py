"""Boolean query engine over transaction lists.

Public API:
    - :func:`compile_query`
    - :class:`CompiledQuery`
    - :func:`filter_transactions`

Queries are compiled per call (tokenize, then shunting-yard to postfix) and
evaluated per transaction with a small boolean stack machine. Errors are
raised to the caller as :class:`~spending_analysis.errors.QuerySyntaxError`
subclasses; nothing here recovers from them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .errors import InvalidSyntaxError
from .logging_setup import get_logger
from .models import Transaction
from .parser import PostfixProgram, to_postfix
from .predicates import evaluate_term
from .tokenizer import tokenize

_logger = get_logger("spending_analysis.query")


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    """A parsed query: the original text and its postfix program."""

    text: str
    program: PostfixProgram

    def matches(self, txn: Transaction) -> bool:
        stack: list[bool] = []
        for tok in self.program:
            if not tok.is_operator:
                stack.append(evaluate_term(tok.text, txn))
            elif tok.text == "NOT":
                if not stack:
                    raise InvalidSyntaxError("NOT needs an operand")
                stack.append(not stack.pop())
            else:
                if len(stack) < 2:
                    raise InvalidSyntaxError(f"{tok.text} needs two operands")
                right = stack.pop()
                left = stack.pop()
                stack.append(left and right if tok.text == "AND" else left or right)
        if len(stack) != 1:
            raise InvalidSyntaxError("query does not reduce to a single condition")
        return stack[0]


def compile_query(query: str) -> CompiledQuery | None:
    """Compile ``query``; returns ``None`` when it is empty or whitespace.

    Raises :class:`~spending_analysis.errors.MismatchedParenthesesError` for
    unbalanced parentheses.
    """

    tokens = tokenize(query)
    if not tokens:
        return None
    program = to_postfix(tokens)
    _logger.debug("Compiled query %r to postfix %s", query, [t.text for t in program])
    return CompiledQuery(text=query, program=program)


def filter_transactions(
    transactions: Sequence[Transaction], query: str
) -> Sequence[Transaction]:
    """Return the transactions matching ``query`` in their original order.

    A blank query returns ``transactions`` itself, untouched. Otherwise a new
    list is returned; the input is never mutated.
    """

    compiled = compile_query(query)
    if compiled is None:
        return transactions
    selected = [txn for txn in transactions if compiled.matches(txn)]
    _logger.debug("Query %r kept %d of %d transactions", query, len(selected), len(transactions))
    return selected


__all__ = ["CompiledQuery", "compile_query", "filter_transactions"]
