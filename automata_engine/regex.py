"""Regular expression to NFA compiler.

Supported syntax, from highest to lowest precedence:

- a literal symbol, ``ε`` for the empty word, or ``\\`` followed by one of
  the reserved characters ``( ) | * \\`` to use it literally; ``,`` is not
  a symbol because edge labels use it to separate symbols
- grouping with ``( ... )``
- postfix Kleene star ``*``
- concatenation by juxtaposition
- alternation ``|``

The parser builds an expression tree which is then turned into an NFA with
Thompson's construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple, Union as TypingUnion

from .automata import EPSILON, LABEL_SEPARATOR, Automaton, Kind, RegexSyntaxError, State, Transition

logger = logging.getLogger(__name__)

RESERVED = "()|*\\"


@dataclass(frozen=True)
class Symbol:
    value: str


@dataclass(frozen=True)
class Concat:
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Union:
    left: "Node"
    right: "Node"


@dataclass(frozen=True)
class Kleene:
    inner: "Node"


Node = TypingUnion[Symbol, Concat, Union, Kleene]


class _Parser:
    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self.index = 0

    def _peek(self) -> str:
        if self.index < len(self.pattern):
            return self.pattern[self.index]
        return ""

    def _fail(self, message: str, position: int) -> RegexSyntaxError:
        return RegexSyntaxError(message, self.pattern, position)

    def parse(self) -> Node:
        if not self.pattern:
            raise self._fail("Empty pattern", 0)
        node = self._parse_union()
        if self.index < len(self.pattern):
            # only an unmatched ')' can stop the union parser early
            raise self._fail("Unbalanced ')'", self.index)
        return node

    def _parse_union(self) -> Node:
        node = self._parse_concat()
        while self._peek() == "|":
            self.index += 1
            node = Union(node, self._parse_concat())
        return node

    def _parse_concat(self) -> Node:
        node = self._parse_star()
        while self.index < len(self.pattern) and self._peek() not in ")|":
            node = Concat(node, self._parse_star())
        return node

    def _parse_star(self) -> Node:
        node = self._parse_primary()
        while self._peek() == "*":
            self.index += 1
            node = Kleene(node)
        return node

    def _parse_primary(self) -> Node:
        start = self.index
        current = self._peek()
        if not current:
            if start > 0 and self.pattern[start - 1] == "|":
                raise self._fail("Empty alternative", start)
            raise self._fail("Unexpected end of pattern, expected a symbol", start)
        if current == "(":
            self.index += 1
            if self._peek() == ")":
                raise self._fail("Empty group", self.index)
            node = self._parse_union()
            if self._peek() != ")":
                raise self._fail(f"Unbalanced '(' opened at position {start}, expected ')'", self.index)
            self.index += 1
            return node
        if current == "|":
            raise self._fail("Empty alternative", start)
        if current == ")":
            raise self._fail("Unexpected ')'", start)
        if current == "*":
            raise self._fail("Dangling '*' with nothing to repeat", start)
        if current == "\\":
            escaped = self.pattern[start + 1 : start + 2]
            if not escaped:
                raise self._fail("Trailing backslash", start)
            if escaped not in RESERVED:
                raise self._fail(f"Invalid escape '\\{escaped}'", start)
            self.index += 2
            return Symbol(escaped)
        if current == LABEL_SEPARATOR:
            raise self._fail(f"'{LABEL_SEPARATOR}' cannot be used as a symbol", start)
        if current.isspace():
            raise self._fail("Unexpected whitespace, expected a symbol", start)
        self.index += 1
        return Symbol(current)


def parse(pattern: str) -> Node:
    """Parse ``pattern`` into an expression tree or raise RegexSyntaxError."""
    if not isinstance(pattern, str):
        raise TypeError("Pattern must be a string.")
    return _Parser(pattern).parse()


@dataclass
class ThompsonBuilder:
    """Turns an expression tree into an NFA, one fresh state pair per node."""

    state_counter: int = 0
    transition_counter: int = 0
    states: List[State] = field(default_factory=list)
    transitions: List[Transition] = field(default_factory=list)

    def _new_state(self) -> str:
        index = self.state_counter
        self.state_counter += 1
        state_id = f"s{index}"
        self.states.append(State(state_id, f"q{index}"))
        return state_id

    def _connect(self, source: str, target: str, symbol: str) -> None:
        self.transitions.append(Transition(f"t{self.transition_counter}", source, target, symbol))
        self.transition_counter += 1

    def build(self, node: Node) -> Tuple[str, str]:
        if isinstance(node, Symbol):
            start = self._new_state()
            end = self._new_state()
            self._connect(start, end, node.value)
            return start, end

        if isinstance(node, Concat):
            left_start, left_end = self.build(node.left)
            right_start, right_end = self.build(node.right)
            self._connect(left_end, right_start, EPSILON)
            return left_start, right_end

        if isinstance(node, Union):
            start = self._new_state()
            end = self._new_state()
            left_start, left_end = self.build(node.left)
            right_start, right_end = self.build(node.right)
            self._connect(start, left_start, EPSILON)
            self._connect(start, right_start, EPSILON)
            self._connect(left_end, end, EPSILON)
            self._connect(right_end, end, EPSILON)
            return start, end

        if isinstance(node, Kleene):
            start = self._new_state()
            end = self._new_state()
            inner_start, inner_end = self.build(node.inner)
            self._connect(start, end, EPSILON)
            self._connect(start, inner_start, EPSILON)
            self._connect(inner_end, end, EPSILON)
            self._connect(inner_end, inner_start, EPSILON)
            return start, end

        raise TypeError(f"Unsupported regex node {node!r}")

    def to_automaton(self, start: str, end: str) -> Automaton:
        states = [
            State(
                state.id,
                state.name,
                is_initial=state.id == start,
                is_accepting=state.id == end,
            )
            for state in self.states
        ]
        return Automaton(states, self.transitions, Kind.NFA)


def compile_regex(pattern: str) -> Automaton:
    """Compile ``pattern`` into an NFA with Thompson's construction."""
    tree = parse(pattern)
    builder = ThompsonBuilder()
    start, end = builder.build(tree)
    automaton = builder.to_automaton(start, end)
    logger.debug(
        "Compiled %r into an NFA with %d states and %d transitions",
        pattern,
        len(automaton.states),
        len(automaton.transitions),
    )
    return automaton
