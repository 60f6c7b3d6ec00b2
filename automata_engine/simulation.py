from __future__ import annotations

import logging
from enum import Enum
from typing import List, Sequence, Tuple, Union

from .automata import (
    Automaton,
    InvalidSimulatorStateError,
    StateSet,
    UnknownSymbolError,
)

logger = logging.getLogger(__name__)

Word = Union[str, Sequence[str]]


class SimulatorStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    HALTED = "halted"


def normalize_word(word: Word) -> Tuple[str, ...]:
    """A string is read one symbol per character; any other sequence is
    taken as a list of symbols."""
    if isinstance(word, str):
        return tuple(word)
    symbols = tuple(word)
    if not all(isinstance(symbol, str) and symbol for symbol in symbols):
        raise ValueError("Input symbols must be non-empty strings.")
    return symbols


def validate_input(automaton: Automaton, word: Word) -> Tuple[str, ...]:
    """Reject the first symbol that is not part of the alphabet."""
    symbols = normalize_word(word)
    for position, symbol in enumerate(symbols):
        if symbol not in automaton.alphabet:
            raise UnknownSymbolError(symbol, position)
    return symbols


class Simulator:
    """Steps an automaton through an input word one symbol at a time.

    The current state set is always epsilon-closed, so the same code path
    serves DFAs and NFAs. A run that reaches the empty set keeps consuming
    input and ends rejected.
    """

    def __init__(self, automaton: Automaton) -> None:
        self._automaton = automaton
        self._status = SimulatorStatus.IDLE
        self._word: Tuple[str, ...] = ()
        self._position = 0
        self._current: StateSet = frozenset()
        self._history: List[StateSet] = []

    @property
    def automaton(self) -> Automaton:
        return self._automaton

    @property
    def status(self) -> SimulatorStatus:
        return self._status

    @property
    def word(self) -> Tuple[str, ...]:
        return self._word

    @property
    def position(self) -> int:
        return self._position

    @property
    def current_states(self) -> StateSet:
        return self._current

    @property
    def history(self) -> Tuple[StateSet, ...]:
        return tuple(self._history)

    @property
    def is_dead(self) -> bool:
        return self._status is not SimulatorStatus.IDLE and not self._current

    @property
    def accepted(self) -> bool:
        if self._status is not SimulatorStatus.HALTED:
            raise InvalidSimulatorStateError(
                f"Acceptance is only known once the run has halted (status: {self._status.value})."
            )
        return bool(self._current & self._automaton.accepting_ids)

    def start(self, word: Word) -> "Simulator":
        initial = self._automaton.require_initial()
        self._word = normalize_word(word)
        self._position = 0
        self._current = self._automaton.epsilon_closure([initial.id])
        self._history = []
        self._status = SimulatorStatus.RUNNING
        if not self._word:
            self._status = SimulatorStatus.HALTED
        logger.debug("Simulation started on %d symbols", len(self._word))
        return self

    def step(self) -> StateSet:
        if self._status is not SimulatorStatus.RUNNING:
            raise InvalidSimulatorStateError(
                f"step() needs a running simulation (status: {self._status.value})."
            )
        symbol = self._word[self._position]
        closed = self._automaton.epsilon_closure(self._current)
        reached = self._automaton.targets(closed, symbol)
        self._current = self._automaton.epsilon_closure(reached)
        self._position += 1
        self._history.append(self._current)
        if not reached:
            logger.debug("Run died on '%s' at position %d", symbol, self._position - 1)
        if self._position == len(self._word):
            self._status = SimulatorStatus.HALTED
        return self._current

    def run(self) -> bool:
        """Step until the run halts and report acceptance."""
        while self._status is SimulatorStatus.RUNNING:
            self.step()
        return self.accepted

    def stop(self) -> None:
        self._status = SimulatorStatus.IDLE
        self._word = ()
        self._position = 0
        self._current = frozenset()
        self._history = []


def accepts(automaton: Automaton, word: Word) -> bool:
    """Validate ``word`` against the alphabet and run it to completion."""
    symbols = validate_input(automaton, word)
    return Simulator(automaton).start(symbols).run()
