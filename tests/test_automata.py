"""Tests for the automaton model and its invariants."""

from __future__ import annotations

import pytest

from automata_engine.automata import (
    EPSILON,
    Automaton,
    AutomatonValidationError,
    Kind,
    MissingInitialStateError,
    State,
    Transition,
    expand_edge,
    split_label,
    state_set_key,
)


def _states(*ids: str) -> list[State]:
    return [State(state_id, state_id, is_initial=index == 0) for index, state_id in enumerate(ids)]


class TestConstruction:
    def test_alphabet_is_derived_without_epsilon(self, branching_nfa: Automaton) -> None:
        assert branching_nfa.alphabet == frozenset({"a", "b"})

    def test_duplicate_state_ids_rejected(self) -> None:
        with pytest.raises(AutomatonValidationError, match="Duplicate state id"):
            Automaton([State("x", "x", is_initial=True), State("x", "y")], [], Kind.NFA)

    def test_duplicate_transition_ids_rejected(self) -> None:
        transitions = [Transition("t", "a", "b", "0"), Transition("t", "b", "a", "1")]
        with pytest.raises(AutomatonValidationError, match="Duplicate transition id"):
            Automaton(_states("a", "b"), transitions, Kind.NFA)

    def test_dangling_endpoint_rejected(self) -> None:
        with pytest.raises(AutomatonValidationError, match="unknown state 'zz'"):
            Automaton(_states("a"), [Transition("t", "a", "zz", "0")], Kind.NFA)

    def test_two_initial_states_rejected(self) -> None:
        states = [State("a", "a", is_initial=True), State("b", "b", is_initial=True)]
        with pytest.raises(AutomatonValidationError, match="More than one initial"):
            Automaton(states, [], Kind.DFA)

    def test_dfa_rejects_epsilon(self) -> None:
        with pytest.raises(AutomatonValidationError, match="Epsilon"):
            Automaton(_states("a", "b"), [Transition("t", "a", "b", EPSILON)], Kind.DFA)

    def test_dfa_rejects_two_targets_for_one_symbol(self) -> None:
        transitions = [Transition("t0", "a", "a", "0"), Transition("t1", "a", "b", "0")]
        with pytest.raises(AutomatonValidationError, match="more than one transition"):
            Automaton(_states("a", "b"), transitions, Kind.DFA)

    @pytest.mark.parametrize("symbol", [",", "a,b", " a", "b "])
    def test_symbols_must_survive_edge_labels(self, symbol: str) -> None:
        with pytest.raises(AutomatonValidationError, match="surrounding whitespace"):
            Automaton(_states("a", "b"), [Transition("t", "a", "b", symbol)], Kind.NFA)

    def test_nfa_allows_nondeterminism(self) -> None:
        transitions = [Transition("t0", "a", "a", "0"), Transition("t1", "a", "b", "0")]
        automaton = Automaton(_states("a", "b"), transitions, Kind.NFA)
        assert automaton.transitions_from("a", "0") == ("a", "b")
        assert not automaton.is_deterministic()

    def test_missing_initial_tolerated_until_strict_validation(self) -> None:
        automaton = Automaton([State("a", "a")], [], Kind.NFA)
        assert automaton.initial_state is None
        assert automaton.validate()
        with pytest.raises(MissingInitialStateError):
            automaton.validate(strict=True)
        with pytest.raises(MissingInitialStateError):
            automaton.require_initial()

    def test_empty_automaton(self) -> None:
        empty = Automaton.empty()
        assert len(empty) == 0
        assert empty.alphabet == frozenset()
        assert empty.validate(strict=True)


class TestQueries:
    def test_epsilon_closure_follows_chains(self) -> None:
        transitions = [
            Transition("e0", "a", "b", EPSILON),
            Transition("e1", "b", "c", EPSILON),
            Transition("e2", "c", "a", EPSILON),
            Transition("t0", "c", "d", "x"),
        ]
        automaton = Automaton(_states("a", "b", "c", "d"), transitions, Kind.NFA)
        assert automaton.epsilon_closure(["a"]) == frozenset({"a", "b", "c"})
        assert automaton.epsilon_closure(["d"]) == frozenset({"d"})
        assert automaton.epsilon_closure([]) == frozenset()

    def test_targets_unions_over_sources(self, branching_nfa: Automaton) -> None:
        assert branching_nfa.targets({"p1", "p2"}, "a") == frozenset({"p1", "p2", "p3"})

    def test_reachable_and_live(self) -> None:
        states = _states("a", "b", "c", "d")
        states[1] = State("b", "b", is_accepting=True)
        transitions = [
            Transition("t0", "a", "b", "0"),
            Transition("t1", "a", "c", "1"),
            Transition("t2", "d", "b", "0"),
        ]
        automaton = Automaton(states, transitions, Kind.DFA)
        assert automaton.reachable_ids() == frozenset({"a", "b", "c"})
        assert automaton.live_ids() == frozenset({"a", "b", "d"})

    def test_structural_equality_ignores_order(self, chain_dfa: Automaton) -> None:
        shuffled = Automaton(
            list(reversed(chain_dfa.states)), list(reversed(chain_dfa.transitions)), Kind.DFA
        )
        assert shuffled == chain_dfa
        assert hash(shuffled) == hash(chain_dfa)
        assert Automaton(chain_dfa.states, chain_dfa.transitions, Kind.NFA) != chain_dfa

    def test_state_set_key_is_canonical(self) -> None:
        assert state_set_key({"s2", "s10", "s1"}) == state_set_key(["s1", "s2", "s10", "s1"])


class TestEdgeExpansion:
    def test_split_label(self) -> None:
        assert split_label("a, b,c") == ("a", "b", "c")
        assert split_label(" a ") == ("a",)
        assert split_label("a,a") == ("a",)

    def test_split_label_rejects_empty(self) -> None:
        with pytest.raises(AutomatonValidationError):
            split_label(" , ")

    def test_single_symbol_edge_keeps_id(self) -> None:
        assert expand_edge("e", "x", "y", "a") == [Transition("e", "x", "y", "a")]

    def test_multi_symbol_edge_becomes_one_transition_per_symbol(self) -> None:
        assert expand_edge("e", "x", "y", "a,b") == [
            Transition("e.0", "x", "y", "a"),
            Transition("e.1", "x", "y", "b"),
        ]

    def test_from_edges_feeds_the_algorithms_expanded_transitions(self) -> None:
        automaton = Automaton.from_edges(
            _states("x", "y"), [("e0", "x", "y", "0, 1"), ("e1", "y", "y", "1")], Kind.DFA
        )
        assert automaton.alphabet == frozenset({"0", "1"})
        assert len(automaton.transitions) == 3
        assert automaton.transitions_from("x", "1") == ("y",)
