from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List

from .automata import Automaton, Kind, State, StateSet, Transition, state_set_key

logger = logging.getLogger(__name__)


def determinize(automaton: Automaton) -> Automaton:
    """Subset construction with epsilon-closure.

    Works for any automaton, deterministic or not. Each reachable subset of
    states becomes exactly one DFA state; empty subsets are dropped instead
    of being turned into a trap state.
    """
    initial = automaton.require_initial()
    alphabet = sorted(automaton.alphabet)
    accepting = automaton.accepting_ids

    start_set = automaton.epsilon_closure([initial.id])
    subset_queue: Deque[StateSet] = deque([start_set])
    key_to_id: Dict[str, str] = {}
    subsets: List[StateSet] = []

    def dfa_id(subset: StateSet) -> str:
        key = state_set_key(subset)
        existing = key_to_id.get(key)
        if existing is not None:
            return existing
        new_id = f"d{len(subsets)}"
        key_to_id[key] = new_id
        subsets.append(subset)
        subset_queue.append(subset)
        return new_id

    key_to_id[state_set_key(start_set)] = "d0"
    subsets.append(start_set)

    transitions: List[Transition] = []
    while subset_queue:
        subset = subset_queue.popleft()
        source = key_to_id[state_set_key(subset)]
        for symbol in alphabet:
            reached = automaton.epsilon_closure(automaton.targets(subset, symbol))
            if not reached:
                continue
            target = dfa_id(reached)
            transitions.append(Transition(f"t{len(transitions)}", source, target, symbol))

    states = [
        State(
            f"d{index}",
            "{" + ",".join(automaton.names_of(subset)) + "}",
            is_initial=index == 0,
            is_accepting=bool(subset & accepting),
        )
        for index, subset in enumerate(subsets)
    ]
    logger.debug(
        "Subset construction turned %d states into %d DFA states",
        len(automaton.states),
        len(states),
    )
    return Automaton(states, transitions, Kind.DFA)
