from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

EPSILON = "ε"

StateSet = FrozenSet[str]


class AutomatonError(Exception):
    """Base class for every failure raised by the engine."""


class AutomatonValidationError(AutomatonError):
    """The automaton breaks one of its structural invariants."""


class RegexSyntaxError(AutomatonError):
    """The pattern handed to the regex compiler is malformed."""

    def __init__(self, message: str, pattern: str, position: int) -> None:
        super().__init__(f"{message} at position {position} in pattern {pattern!r}")
        self.pattern = pattern
        self.position = position


class MissingInitialStateError(AutomatonError):
    """The automaton has no initial state to start from."""


class NotADfaError(AutomatonError):
    """An operation that needs a DFA was given something else."""


class UnknownSymbolError(AutomatonError):
    """Input contains a symbol outside the automaton's alphabet."""

    def __init__(self, symbol: str, position: int) -> None:
        super().__init__(f"Symbol '{symbol}' at position {position} is not part of the alphabet.")
        self.symbol = symbol
        self.position = position


class InvalidSimulatorStateError(AutomatonError):
    """The simulator was driven from a status that does not allow it."""


class Kind(Enum):
    DFA = "DFA"
    NFA = "NFA"


@dataclass(frozen=True)
class State:
    id: str
    name: str
    is_initial: bool = False
    is_accepting: bool = False


@dataclass(frozen=True)
class Transition:
    id: str
    source: str
    target: str
    symbol: str

    @property
    def is_epsilon(self) -> bool:
        return self.symbol == EPSILON


def state_set_key(ids: Iterable[str]) -> str:
    """Canonical key for a set of state ids: sorted and comma joined."""
    return ",".join(sorted(set(ids)))


LABEL_SEPARATOR = ","
LABEL_SPLIT_RE = re.compile(r"\s*,\s*")


def split_label(label: str) -> Tuple[str, ...]:
    """Split an edge label such as ``"a, b,c"`` into its symbols."""
    symbols = [symbol for symbol in LABEL_SPLIT_RE.split(label.strip()) if symbol]
    if not symbols:
        raise AutomatonValidationError(f"Edge label {label!r} carries no symbol.")
    return tuple(dict.fromkeys(symbols))


def expand_edge(edge_id: str, source: str, target: str, label: str) -> List[Transition]:
    """Expand a multi-symbol edge into one transition per symbol.

    A single-symbol edge keeps its id; otherwise each transition gets the
    edge id suffixed with the symbol's index.
    """
    symbols = split_label(label)
    if len(symbols) == 1:
        return [Transition(edge_id, source, target, symbols[0])]
    return [
        Transition(f"{edge_id}.{index}", source, target, symbol)
        for index, symbol in enumerate(symbols)
    ]


class Automaton:
    __slots__ = (
        "_states",
        "_transitions",
        "_kind",
        "_state_index",
        "_outgoing",
        "_alphabet",
        "_initial",
    )

    def __init__(
        self,
        states: Sequence[State],
        transitions: Sequence[Transition],
        kind: Kind,
    ) -> None:
        if not isinstance(kind, Kind):
            raise AutomatonValidationError(f"Unknown automaton kind {kind!r}.")
        self._kind = kind
        self._states = tuple(states)
        self._transitions = tuple(transitions)

        self._state_index: Dict[str, State] = {}
        for state in self._states:
            self._normalize_id(state.id, "State")
            if state.id in self._state_index:
                raise AutomatonValidationError(f"Duplicate state id '{state.id}'.")
            self._state_index[state.id] = state

        initial = [state for state in self._states if state.is_initial]
        if len(initial) > 1:
            names = ", ".join(state.name for state in initial)
            raise AutomatonValidationError(f"More than one initial state: {names}.")
        self._initial: Optional[State] = initial[0] if initial else None

        self._outgoing: Dict[Tuple[str, str], List[str]] = {}
        seen_ids = set()
        for transition in self._transitions:
            self._normalize_id(transition.id, "Transition")
            if transition.id in seen_ids:
                raise AutomatonValidationError(f"Duplicate transition id '{transition.id}'.")
            seen_ids.add(transition.id)
            for endpoint in (transition.source, transition.target):
                if endpoint not in self._state_index:
                    raise AutomatonValidationError(
                        f"Transition '{transition.id}' references unknown state '{endpoint}'."
                    )
            if not isinstance(transition.symbol, str) or not transition.symbol:
                raise AutomatonValidationError(
                    f"Transition '{transition.id}' needs a non-empty symbol."
                )
            if LABEL_SEPARATOR in transition.symbol or transition.symbol != transition.symbol.strip():
                raise AutomatonValidationError(
                    f"Transition '{transition.id}' symbol {transition.symbol!r} cannot contain "
                    f"'{LABEL_SEPARATOR}' or surrounding whitespace."
                )
            key = (transition.source, transition.symbol)
            targets = self._outgoing.setdefault(key, [])
            if kind is Kind.DFA:
                if transition.is_epsilon:
                    raise AutomatonValidationError(
                        f"Epsilon transition '{transition.id}' is not allowed in a DFA."
                    )
                if targets:
                    raise AutomatonValidationError(
                        f"State '{transition.source}' has more than one transition on "
                        f"'{transition.symbol}' in a DFA."
                    )
            if transition.target not in targets:
                targets.append(transition.target)

        self._alphabet = frozenset(
            transition.symbol for transition in self._transitions if not transition.is_epsilon
        )

    # ---------------------------------------------------------------
    @staticmethod
    def _normalize_id(value: str, label: str) -> str:
        if not isinstance(value, str) or not value:
            raise AutomatonValidationError(f"{label} ids must be non-empty strings.")
        return value

    @classmethod
    def empty(cls, kind: Kind = Kind.DFA) -> "Automaton":
        return cls((), (), kind)

    @classmethod
    def from_edges(
        cls,
        states: Sequence[State],
        edges: Iterable[Tuple[str, str, str, str]],
        kind: Kind,
    ) -> "Automaton":
        """Build an automaton from ``(id, source, target, label)`` edges whose
        labels may list several comma-separated symbols."""
        transitions: List[Transition] = []
        for edge_id, source, target, label in edges:
            transitions.extend(expand_edge(edge_id, source, target, label))
        return cls(states, transitions, kind)

    # ---------------------------------------------------------------
    @property
    def states(self) -> Tuple[State, ...]:
        return self._states

    @property
    def transitions(self) -> Tuple[Transition, ...]:
        return self._transitions

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def alphabet(self) -> FrozenSet[str]:
        return self._alphabet

    @property
    def initial_state(self) -> Optional[State]:
        return self._initial

    @property
    def accepting_ids(self) -> StateSet:
        return frozenset(state.id for state in self._states if state.is_accepting)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[State]:
        return iter(self._states)

    def __contains__(self, state_id: object) -> bool:
        return state_id in self._state_index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Automaton):
            return NotImplemented
        return (
            self._kind is other._kind
            and set(self._states) == set(other._states)
            and set(self._transitions) == set(other._transitions)
        )

    def __hash__(self) -> int:
        return hash((self._kind, frozenset(self._states), frozenset(self._transitions)))

    def __repr__(self) -> str:
        return (
            f"Automaton(kind={self._kind.value}, states={len(self._states)}, "
            f"transitions={len(self._transitions)}, alphabet={sorted(self._alphabet)})"
        )

    # ---------------------------------------------------------------
    def state(self, state_id: str) -> State:
        try:
            return self._state_index[state_id]
        except KeyError as exc:
            raise AutomatonValidationError(f"State '{state_id}' does not exist.") from exc

    def require_initial(self) -> State:
        if self._initial is None:
            raise MissingInitialStateError("Automaton has no initial state.")
        return self._initial

    def validate(self, *, strict: bool = False) -> bool:
        """Invariants are checked on construction; ``strict`` also demands
        exactly one initial state on a non-empty automaton."""
        if strict and self._states and self._initial is None:
            raise MissingInitialStateError("Non-empty automaton has no initial state.")
        return True

    def is_deterministic(self) -> bool:
        """Structural check that ignores the declared kind."""
        for (_, symbol), targets in self._outgoing.items():
            if symbol == EPSILON or len(targets) > 1:
                return False
        return True

    def transitions_from(self, state_id: str, symbol: str) -> Tuple[str, ...]:
        return tuple(self._outgoing.get((state_id, symbol), ()))

    def targets(self, state_ids: Iterable[str], symbol: str) -> StateSet:
        reached = set()
        for state_id in state_ids:
            reached.update(self._outgoing.get((state_id, symbol), ()))
        return frozenset(reached)

    def epsilon_closure(self, state_ids: Iterable[str]) -> StateSet:
        closure = set(state_ids)
        queue = deque(closure)
        while queue:
            here = queue.popleft()
            for nxt in self._outgoing.get((here, EPSILON), ()):
                if nxt not in closure:
                    closure.add(nxt)
                    queue.append(nxt)
        return frozenset(closure)

    def reachable_ids(self) -> StateSet:
        """Ids reachable from the initial state over any transition."""
        if self._initial is None:
            return frozenset()
        successors: Dict[str, List[str]] = {}
        for transition in self._transitions:
            successors.setdefault(transition.source, []).append(transition.target)
        reachable = {self._initial.id}
        queue = deque([self._initial.id])
        while queue:
            here = queue.popleft()
            for nxt in successors.get(here, ()):
                if nxt not in reachable:
                    reachable.add(nxt)
                    queue.append(nxt)
        return frozenset(reachable)

    def live_ids(self) -> StateSet:
        """Ids from which some accepting state can be reached."""
        predecessors: Dict[str, List[str]] = {}
        for transition in self._transitions:
            predecessors.setdefault(transition.target, []).append(transition.source)
        alive = set(self.accepting_ids)
        queue = deque(alive)
        while queue:
            here = queue.popleft()
            for src in predecessors.get(here, ()):
                if src not in alive:
                    alive.add(src)
                    queue.append(src)
        return frozenset(alive)

    def names_of(self, state_ids: Iterable[str]) -> List[str]:
        return sorted(self._state_index[state_id].name for state_id in state_ids)
