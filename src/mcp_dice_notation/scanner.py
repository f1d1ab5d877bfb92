from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from .errors import IntegerOverflowError, InvalidCharacterError, InvalidWordError, LexicalError


VALID_WORDS: tuple[str, ...] = ("d", "k", "kh", "kl", "dh", "dl", "adv", "dis", "da", "ad")

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_DIGITS = frozenset("0123456789")


class TokenKind(enum.Enum):
    INTEGER = "integer"
    WORD = "word"
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIVIDE = "/"
    PERCENT = "%"
    OPEN = "open"
    CLOSE = "close"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: int | str | None = None

    def __str__(self) -> str:
        if self.value is not None:
            return str(self.value)
        return self.kind.value


ScanItem: TypeAlias = Token | LexicalError


_SYMBOLS: dict[str, Token] = {
    "+": Token(TokenKind.PLUS),
    "-": Token(TokenKind.MINUS),
    "*": Token(TokenKind.TIMES),
    "×": Token(TokenKind.TIMES),
    "/": Token(TokenKind.DIVIDE),
    "÷": Token(TokenKind.DIVIDE),
    "%": Token(TokenKind.PERCENT),
    "(": Token(TokenKind.OPEN, "("),
    "[": Token(TokenKind.OPEN, "["),
    ")": Token(TokenKind.CLOSE, ")"),
    "]": Token(TokenKind.CLOSE, "]"),
}


class Scanner:
    """Lazily split dice notation into tokens.

    Each item is either a ``Token`` or a ``LexicalError`` instance. Errors are
    yielded rather than raised so the consumer decides whether to stop; the
    scanner itself resumes after the offending characters.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def __iter__(self) -> Iterator[ScanItem]:
        return self

    def __next__(self) -> ScanItem:
        text = self.text
        n = len(text)

        while self.pos < n and text[self.pos].isspace():
            self.pos += 1

        if self.pos >= n:
            raise StopIteration

        start = self.pos
        ch = text[start]

        if ch in _DIGITS:
            while self.pos < n and text[self.pos] in _DIGITS:
                self.pos += 1
            digits = text[start : self.pos]
            # Length check first: int() refuses very long digit strings.
            if len(digits.lstrip("0")) > 10 or int(digits) > INT_MAX:
                return IntegerOverflowError(digits)
            return Token(TokenKind.INTEGER, int(digits))

        if ch.isalpha():
            while self.pos < n and text[self.pos].isalpha():
                self.pos += 1
            word = text[start : self.pos]
            if word not in VALID_WORDS:
                return InvalidWordError(word)
            return Token(TokenKind.WORD, word)

        self.pos += 1
        token = _SYMBOLS.get(ch)
        if token is None:
            return InvalidCharacterError(ch)
        return token


def tokenize(text: str) -> list[Token]:
    """Scan the whole input, raising the first lexical error."""

    tokens: list[Token] = []
    for item in Scanner(text):
        if isinstance(item, LexicalError):
            raise item
        tokens.append(item)
    return tokens
