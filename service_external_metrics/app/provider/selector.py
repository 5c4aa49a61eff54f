"""
Kubernetes label selector parsing.

Supports the string form accepted by the ``labelSelector`` query parameter:

    appName=checkout
    appName==checkout,tier!=canary
    appName in (checkout, cart),!legacy
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from shared.errors import InvalidSelectorError


class Operator(str, Enum):
    """Selector requirement operators."""
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"


EQUALITY_OPERATORS = frozenset({Operator.EQUALS, Operator.DOUBLE_EQUALS, Operator.IN})

_TOKEN_RE = re.compile(r"\s*(==|!=|=|!|\(|\)|,|>|<|[A-Za-z0-9._/-]+)")


@dataclass(frozen=True)
class Requirement:
    """A single ``key <operator> values`` constraint."""
    key: str
    operator: Operator
    values: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.operator == Operator.EXISTS:
            return self.key
        if self.operator == Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator.value} ({','.join(self.values)})"
        if self.operator == Operator.GREATER_THAN:
            return f"{self.key}>{self.values[0]}"
        if self.operator == Operator.LESS_THAN:
            return f"{self.key}<{self.values[0]}"
        return f"{self.key}{self.operator.value}{self.values[0]}"


@dataclass(frozen=True)
class Selector:
    """An ordered set of requirements, all of which must hold."""
    requirements: Tuple[Requirement, ...] = ()

    def first_equality_value(self, key: str) -> Optional[str]:
        """Return the first listed value of the first equality requirement on ``key``."""
        for requirement in self.requirements:
            if requirement.key == key and requirement.operator in EQUALITY_OPERATORS and requirement.values:
                return requirement.values[0]
        return None

    def __str__(self) -> str:
        return ",".join(str(r) for r in self.requirements)


def parse_selector(text: Optional[str]) -> Selector:
    """Parse a label selector string. An empty or missing selector selects everything."""
    if text is None or not text.strip():
        return Selector()

    parser = _Parser(text, _tokenize(text))
    return Selector(tuple(parser.parse()))


def _tokenize(text: str) -> List[str]:
    tokens = []
    pos = 0
    while pos < len(text):
        if text[pos:].strip() == "":
            break
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise InvalidSelectorError(text)
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


class _Parser:
    def __init__(self, text: str, tokens: List[str]):
        self.text = text
        self.tokens = tokens
        self.pos = 0

    def parse(self) -> List[Requirement]:
        requirements = []
        while True:
            requirements.append(self._requirement())
            token = self._next()
            if token is None:
                return requirements
            if token != ",":
                self._fail()

    def _requirement(self) -> Requirement:
        token = self._next()
        if token == "!":
            return Requirement(self._key(), Operator.DOES_NOT_EXIST)
        if token is None:
            self._fail()
        self.pos -= 1
        key = self._key()

        token = self._peek()
        if token is None or token == ",":
            return Requirement(key, Operator.EXISTS)

        self._next()
        if token in ("=", "==", "!="):
            operator = {"=": Operator.EQUALS, "==": Operator.DOUBLE_EQUALS, "!=": Operator.NOT_EQUALS}[token]
            return Requirement(key, operator, (self._value(),))
        if token in (">", "<"):
            value = self._value()
            if not re.fullmatch(r"-?\d+", value):
                self._fail()
            operator = Operator.GREATER_THAN if token == ">" else Operator.LESS_THAN
            return Requirement(key, operator, (value,))
        if token in ("in", "notin"):
            operator = Operator.IN if token == "in" else Operator.NOT_IN
            return Requirement(key, operator, self._value_set())

        self._fail()

    def _key(self) -> str:
        token = self._next()
        if token is None or not _is_word(token):
            self._fail()
        return token

    def _value(self) -> str:
        # An empty value is legal: "key=" or "key=,other"
        token = self._peek()
        if token is None or token == ",":
            return ""
        self._next()
        if not _is_word(token):
            self._fail()
        return token

    def _value_set(self) -> Tuple[str, ...]:
        if self._next() != "(":
            self._fail()

        values: List[str] = []
        while True:
            token = self._next()
            if token is None or not _is_word(token):
                self._fail()
            if token not in values:
                values.append(token)

            token = self._next()
            if token == ")":
                return tuple(values)
            if token != ",":
                self._fail()

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Optional[str]:
        token = self._peek()
        if token is not None:
            self.pos += 1
        return token

    def _fail(self):
        raise InvalidSelectorError(self.text)


def _is_word(token: str) -> bool:
    return token not in ("==", "!=", "=", "!", "(", ")", ",", ">", "<")
