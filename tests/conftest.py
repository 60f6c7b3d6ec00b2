"""Shared fixtures for the engine tests."""

from __future__ import annotations

from typing import Callable, FrozenSet, Iterable, Tuple

import pytest

from automata_engine.automata import EPSILON, Automaton, Kind, State, Transition
from helpers import all_words, run_word


@pytest.fixture
def language_of() -> Callable[[Automaton, Iterable[str], int], FrozenSet[Tuple[str, ...]]]:
    """Accepted words up to ``max_length`` over ``alphabet``."""

    def _language(automaton: Automaton, alphabet: Iterable[str], max_length: int = 6):
        return frozenset(word for word in all_words(alphabet, max_length) if run_word(automaton, word))

    return _language


@pytest.fixture
def chain_dfa() -> Automaton:
    """q0 -a-> q1 -a-> q2 -a-> q2 with only q2 accepting."""
    states = [
        State("q0", "q0", is_initial=True),
        State("q1", "q1"),
        State("q2", "q2", is_accepting=True),
    ]
    transitions = [
        Transition("t0", "q0", "q1", "a"),
        Transition("t1", "q1", "q2", "a"),
        Transition("t2", "q2", "q2", "a"),
    ]
    return Automaton(states, transitions, Kind.DFA)


@pytest.fixture
def branching_nfa() -> Automaton:
    """Words over {a, b} whose second to last symbol is 'a', plus an epsilon hop."""
    states = [
        State("p0", "p0", is_initial=True),
        State("p1", "p1"),
        State("p2", "p2"),
        State("p3", "p3", is_accepting=True),
    ]
    transitions = [
        Transition("e0", "p0", "p1", EPSILON),
        Transition("t0", "p1", "p1", "a"),
        Transition("t1", "p1", "p1", "b"),
        Transition("t2", "p1", "p2", "a"),
        Transition("t3", "p2", "p3", "a"),
        Transition("t4", "p2", "p3", "b"),
    ]
    return Automaton(states, transitions, Kind.NFA)
