from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .automata import Automaton, Kind, NotADfaError, State, StateSet, Transition

logger = logging.getLogger(__name__)

Partition = Tuple[StateSet, ...]


def _require_dfa(automaton: Automaton) -> None:
    if automaton.kind is not Kind.DFA:
        raise NotADfaError(
            f"Minimization needs a DFA, got an {automaton.kind.value}; determinize it first."
        )


def prune(dfa: Automaton) -> Automaton:
    """Drop states unreachable from the initial state and states that can
    never reach an accepting state. The initial state always survives."""
    _require_dfa(dfa)
    if not dfa.states:
        return dfa
    initial = dfa.require_initial()
    keep = dfa.reachable_ids() & (dfa.live_ids() | {initial.id})
    states = [state for state in dfa.states if state.id in keep]
    transitions = [
        transition
        for transition in dfa.transitions
        if transition.source in keep and transition.target in keep
    ]
    if len(states) != len(dfa.states):
        logger.debug("Pruned %d unreachable or dead states", len(dfa.states) - len(states))
    return Automaton(states, transitions, Kind.DFA)


def _split(dfa: Automaton, partition: Partition, alphabet: Sequence[str]) -> Partition:
    block_of: Dict[str, int] = {}
    for index, block in enumerate(partition):
        for state_id in block:
            block_of[state_id] = index

    refined: List[StateSet] = []
    for block in partition:
        groups: Dict[Tuple[Optional[int], ...], List[str]] = {}
        for state in dfa.states:
            if state.id not in block:
                continue
            signature = []
            for symbol in alphabet:
                targets = dfa.transitions_from(state.id, symbol)
                signature.append(block_of[targets[0]] if targets else None)
            groups.setdefault(tuple(signature), []).append(state.id)
        refined.extend(frozenset(members) for members in groups.values())
    return tuple(refined)


def refine_partitions(dfa: Automaton) -> List[Partition]:
    """Moore partition refinement over the pruned DFA.

    Returns every round, starting with the accepting / non-accepting split
    and ending with the stable partition. An empty DFA has no rounds.
    """
    trimmed = prune(dfa)
    if not trimmed.states:
        return []
    alphabet = sorted(trimmed.alphabet)
    accepting = frozenset(state.id for state in trimmed.states if state.is_accepting)
    rejecting = frozenset(state.id for state in trimmed.states if not state.is_accepting)
    partition: Partition = tuple(block for block in (accepting, rejecting) if block)

    rounds = [partition]
    while True:
        refined = _split(trimmed, partition, alphabet)
        if len(refined) == len(partition):
            break
        partition = refined
        rounds.append(partition)
    logger.debug("Partition refinement settled after %d rounds", len(rounds))
    return rounds


def minimize(dfa: Automaton) -> Automaton:
    """Return the minimal DFA recognising the same language as ``dfa``."""
    rounds = refine_partitions(dfa)
    if not rounds:
        return Automaton.empty(Kind.DFA)
    trimmed = prune(dfa)
    initial_id = trimmed.require_initial().id

    blocks = sorted(rounds[-1], key=lambda block: initial_id not in block)
    block_ids: Dict[str, str] = {}
    states: List[State] = []
    for index, block in enumerate(blocks):
        block_id = f"m{index}"
        for state_id in block:
            block_ids[state_id] = block_id
        names = trimmed.names_of(block)
        states.append(
            State(
                block_id,
                names[0] if len(names) == 1 else "{" + ",".join(names) + "}",
                is_initial=initial_id in block,
                is_accepting=any(trimmed.state(state_id).is_accepting for state_id in block),
            )
        )

    transitions: List[Transition] = []
    for block in blocks:
        source = block_ids[next(iter(block))]
        for symbol in sorted(trimmed.alphabet):
            targets = trimmed.targets(block, symbol)
            if not targets:
                continue
            target = block_ids[next(iter(targets))]
            transitions.append(Transition(f"t{len(transitions)}", source, target, symbol))

    logger.debug("Minimized %d states down to %d", len(dfa.states), len(states))
    return Automaton(states, transitions, Kind.DFA)
