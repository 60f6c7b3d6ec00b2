"""One entry point per engine operation, for editors and other front ends.

Every command takes its inputs by value and returns a fresh automaton or
simulator handle; nothing here holds state between calls.
"""

from __future__ import annotations

import logging

from . import determinize as _determinize
from . import minimize as _minimize
from . import regex as _regex
from .automata import Automaton
from .simulation import Simulator, Word, validate_input

logger = logging.getLogger(__name__)


def compile_regex(pattern: str) -> Automaton:
    automaton = _regex.compile_regex(pattern)
    logger.info("Compiled regex %r: %d states", pattern, len(automaton.states))
    return automaton


def determinize(automaton: Automaton) -> Automaton:
    result = _determinize.determinize(automaton)
    logger.info(
        "Determinized %s with %d states into a DFA with %d states",
        automaton.kind.value,
        len(automaton.states),
        len(result.states),
    )
    return result


def minimize(automaton: Automaton) -> Automaton:
    result = _minimize.minimize(automaton)
    logger.info("Minimized DFA from %d to %d states", len(automaton.states), len(result.states))
    return result


def simulation_start(automaton: Automaton, word: Word) -> Simulator:
    """Validate ``word`` and return a simulator positioned before its first symbol."""
    symbols = validate_input(automaton, word)
    return Simulator(automaton).start(symbols)


def simulation_step(handle: Simulator) -> Simulator:
    handle.step()
    return handle


def simulation_stop(handle: Simulator) -> None:
    handle.stop()
