"""Dice notation exception hierarchy.

Every error renders as ``[CODE] message`` so callers (and MCP clients) can
match on a stable prefix.
"""

from __future__ import annotations


class DiceError(ValueError):
    """User-facing errors (fail-fast, no partial result)."""

    code = "DICE_ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")


# Lexical errors


class LexicalError(DiceError):
    code = "LEXICAL_ERROR"


class InvalidCharacterError(LexicalError):
    code = "INVALID_CHARACTER"

    def __init__(self, char: str) -> None:
        self.char = char
        super().__init__(f"Invalid character: {char!r}.")


class InvalidWordError(LexicalError):
    code = "INVALID_WORD"

    def __init__(self, word: str) -> None:
        self.word = word
        super().__init__(
            f"Invalid word: {word!r}. Recognized words are d, k, kh, kl, dh, dl, adv, ad, dis, da."
        )


class IntegerOverflowError(LexicalError):
    code = "INTEGER_OVERFLOW"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Integer {text} does not fit in 32 bits.")


# Syntax errors


class ParseError(DiceError):
    code = "PARSE_ERROR"


class UnexpectedTokenError(ParseError):
    code = "UNEXPECTED_TOKEN"

    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(context)


class UnexpectedEndError(ParseError):
    code = "UNEXPECTED_END"

    def __init__(self, context: str) -> None:
        self.context = context
        super().__init__(context)


class InvalidDieError(ParseError):
    code = "INVALID_DIE"

    def __init__(self, sides: int) -> None:
        self.sides = sides
        super().__init__(
            f"Invalid die: d{sides}. Only d4,d6,d8,d10,d12,d20,d100 are supported. Example: '2d10 + 2d4 + 4'."
        )


class MismatchedParenthesesError(ParseError):
    code = "MISMATCHED_PARENTHESES"

    def __init__(self, open: str, close: str) -> None:
        self.open = open
        self.close = close
        super().__init__(f"Closing {close!r} does not match opening {open!r}.")


class NestingTooDeepError(ParseError):
    code = "NESTING_TOO_DEEP"

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Expression nests deeper than {limit} levels.")


class LexicalParseError(ParseError):
    """A lexical error surfaced while the parser was reading tokens."""

    def __init__(self, error: LexicalError) -> None:
        self.error = error
        super().__init__(error.message, code=error.code)


# Evaluation errors


class EvaluationError(DiceError):
    code = "EVALUATION_ERROR"


class InvalidSelectionError(EvaluationError):
    code = "INVALID_SELECTION"

    def __init__(self, selection_size: int, pool_size: int) -> None:
        self.selection_size = selection_size
        self.pool_size = pool_size
        super().__init__(f"Cannot select {selection_size} dice from a pool of {pool_size}.")


class DivideByZeroError(EvaluationError):
    code = "DIVIDE_BY_ZERO"

    def __init__(self) -> None:
        super().__init__("Division by zero.")


class StackUnderflowError(EvaluationError):
    code = "STACK_UNDERFLOW"

    def __init__(self) -> None:
        super().__init__("Stack underflow.")


class InvalidRollError(EvaluationError):
    code = "INVALID_ROLL"

    def __init__(self, count: int, sides: int) -> None:
        self.count = count
        self.sides = sides
        super().__init__(f"Cannot roll {count}d{sides}.")


class TooManyDiceError(EvaluationError):
    code = "TOO_MANY_DICE"

    def __init__(self, requested: int, limit: int) -> None:
        self.requested = requested
        self.limit = limit
        super().__init__(f"Expression rolls {requested} dice; the limit is {limit}.")


# Request boundary


class InputTooLongError(DiceError):
    code = "INPUT_TOO_LONG"

    def __init__(self, length: int, limit: int) -> None:
        self.length = length
        self.limit = limit
        super().__init__(f"Input is {length} characters; the limit is {limit}.")
