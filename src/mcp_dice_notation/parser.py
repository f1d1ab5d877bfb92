"""Recursive-descent parser for dice notation.

Grammar::

    root        = sum
    sum         = term { ("+" | "-") term }
    term        = factor { ("*" | "/") factor }
    factor      = "(" sum ")" | "[" sum "]" | "-" factor | roll-or-int
    roll-or-int = integer ["d" roll-tail] | "d" roll-tail
    roll-tail   = (integer-sides | "%")? selection?
    selection   = ( ("k"|"kh"|"kl") integer? | ("d"|"dh"|"dl") integer?
                  | "adv" | "ad" | "dis" | "da" ) selection?

The word ``d`` means "dice" in ``roll-or-int`` and "drop lowest" in
``selection``; which one is decided purely by grammatical position.
"""

from __future__ import annotations

import logging
from typing import TypeAlias, cast

from .config import MAX_DEPTH_LIMIT
from .errors import (
    InputTooLongError,
    InvalidDieError,
    LexicalError,
    LexicalParseError,
    MismatchedParenthesesError,
    NestingTooDeepError,
    UnexpectedEndError,
    UnexpectedTokenError,
)
from .lookahead import Lookahead
from .models import (
    ALLOWED_DIE_SIDES,
    DEFAULT_DIE_SIDES,
    PERCENTILE_SIDES,
    Add,
    Divide,
    Literal,
    Multiply,
    Negate,
    Node,
    ParsedRollRequest,
    Roll,
    Select,
    Selection,
    Subtract,
    depth,
)
from .printer import to_notation
from .scanner import ScanItem, Scanner, Token, TokenKind


logger = logging.getLogger(__name__)

TokenStream: TypeAlias = Lookahead[ScanItem]

# Bounds parser recursion (brackets, negation, selection chains).
DEFAULT_MAX_NESTING = 64

_CLOSERS = {"(": ")", "[": "]"}

_COUNTED_SELECTIONS = {
    "k": Selection.KEEP_HIGHEST,
    "kh": Selection.KEEP_HIGHEST,
    "kl": Selection.KEEP_LOWEST,
    "d": Selection.DROP_LOWEST,
    "dh": Selection.DROP_HIGHEST,
    "dl": Selection.DROP_LOWEST,
}

_REROLL_SELECTIONS = {
    "adv": Selection.ADVANTAGE,
    "ad": Selection.ADVANTAGE,
    "dis": Selection.DISADVANTAGE,
    "da": Selection.DISADVANTAGE,
}


def _is_word(token: Token | None, *words: str) -> bool:
    return token is not None and token.kind is TokenKind.WORD and token.value in words


class Parser:
    def __init__(self, tokens: TokenStream, max_nesting: int = DEFAULT_MAX_NESTING) -> None:
        self.tokens = tokens
        self.max_nesting = max_nesting
        self.nesting = 0

    def _peek(self) -> Token | None:
        item = self.tokens.peek()
        if isinstance(item, LexicalError):
            raise LexicalParseError(item) from item
        return item

    def _advance(self) -> Token | None:
        item = self.tokens.advance()
        if isinstance(item, LexicalError):
            raise LexicalParseError(item) from item
        return item

    def _nest(self) -> None:
        self.nesting += 1
        if self.nesting > self.max_nesting:
            raise NestingTooDeepError(self.max_nesting)

    def parse_root(self) -> Node:
        root = self.parse_sum()

        leftover = self._peek()
        if leftover is not None:
            raise UnexpectedTokenError(f"Unexpected leftover token: '{leftover}'")
        return root

    def parse_sum(self) -> Node:
        left = self.parse_term()

        while True:
            token = self._peek()
            if token is None:
                break
            if token.kind is TokenKind.PLUS:
                self._advance()
                left = Add(left, self.parse_term())
            elif token.kind is TokenKind.MINUS:
                self._advance()
                left = Subtract(left, self.parse_term())
            else:
                break

        return left

    def parse_term(self) -> Node:
        left = self.parse_factor()

        while True:
            token = self._peek()
            if token is None:
                break
            if token.kind is TokenKind.TIMES:
                self._advance()
                left = Multiply(left, self.parse_factor())
            elif token.kind is TokenKind.DIVIDE:
                self._advance()
                left = Divide(left, self.parse_factor())
            else:
                break

        return left

    def parse_factor(self) -> Node:
        token = self._peek()

        if token is None:
            raise UnexpectedEndError("Unexpected end of input")

        if token.kind is TokenKind.OPEN:
            self._nest()
            node = self.parse_group(str(token.value))
            self.nesting -= 1
            return node

        if token.kind is TokenKind.MINUS:
            self._advance()
            self._nest()
            node = Negate(self.parse_factor())
            self.nesting -= 1
            return node

        if token.kind is TokenKind.INTEGER:
            self._advance()
            value = cast(int, token.value)
            if _is_word(self._peek(), "d"):
                self._advance()
                return self.parse_roll_tail(value)
            return Literal(value)

        if _is_word(token, "d"):
            self._advance()
            return self.parse_roll_tail(1)

        raise UnexpectedTokenError(f"'{token}' unexpected in factor")

    def parse_group(self, open_ch: str) -> Node:
        self._advance()
        inner = self.parse_sum()

        token = self._peek()
        if token is None:
            raise UnexpectedEndError(f"Expression ended without closing '{_CLOSERS[open_ch]}'")
        if token.kind is not TokenKind.CLOSE:
            raise UnexpectedTokenError(f"'{token}' unexpected in parenthetical")

        self._advance()
        if token.value != _CLOSERS[open_ch]:
            raise MismatchedParenthesesError(open_ch, str(token.value))
        return inner

    def parse_roll_tail(self, count: int) -> Roll:
        token = self._peek()
        sides = DEFAULT_DIE_SIDES

        if token is not None and token.kind is TokenKind.INTEGER:
            sides = cast(int, token.value)
            if sides not in ALLOWED_DIE_SIDES:
                raise InvalidDieError(sides)
            self._advance()
        elif token is not None and token.kind is TokenKind.PERCENT:
            sides = PERCENTILE_SIDES
            self._advance()

        select = self.parse_selection()
        return Roll(count=Literal(count), sides=Literal(sides), select=select)

    def parse_selection(self) -> Select | None:
        token = self._peek()
        if token is None or token.kind is not TokenKind.WORD:
            return None

        word = str(token.value)
        if word not in _COUNTED_SELECTIONS and word not in _REROLL_SELECTIONS:
            return None

        self._advance()
        self._nest()

        if word in _REROLL_SELECTIONS:
            node = Select(_REROLL_SELECTIONS[word], next=self.parse_selection())
        else:
            count: Node | None = None
            after = self._peek()
            if after is not None and after.kind is TokenKind.INTEGER:
                count = Literal(cast(int, after.value))
                self._advance()
            node = Select(_COUNTED_SELECTIONS[word], count=count, next=self.parse_selection())

        self.nesting -= 1
        return node


def parse(text: str, max_nesting: int = DEFAULT_MAX_NESTING) -> Node:
    """Parse dice notation into a syntax tree. Raises ParseError subclasses."""

    return Parser(Lookahead(Scanner(text)), max_nesting=max_nesting).parse_root()


def parse_request(
    text: str,
    max_length: int | None = None,
    max_depth: int | None = MAX_DEPTH_LIMIT,
) -> ParsedRollRequest:
    """Parse ``text`` and attach its canonical notation.

    ``max_length`` bounds the raw text and ``max_depth`` the depth of the
    resulting tree (long chains of ``+`` nest without any brackets).
    Passing ``max_depth=None`` lifts the depth check; trees deeper than
    ``MAX_DEPTH_LIMIT`` may then exhaust the interpreter's recursion limit.
    """

    if max_length is not None and len(text) > max_length:
        raise InputTooLongError(len(text), max_length)

    root = parse(text)
    if max_depth is not None and depth(root) > max_depth:
        raise NestingTooDeepError(max_depth)

    normalized_expression = to_notation(root)
    logger.debug("parsed %r as %s", text, normalized_expression)

    return ParsedRollRequest(
        input=text,
        root=root,
        normalized_expression=normalized_expression,
    )
