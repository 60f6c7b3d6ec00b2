"""Tests for pruning and Moore partition refinement."""

from __future__ import annotations

import pytest

from automata_engine.automata import (
    Automaton,
    Kind,
    MissingInitialStateError,
    NotADfaError,
    State,
    Transition,
)
from automata_engine.determinize import determinize
from automata_engine.minimize import minimize, prune, refine_partitions
from automata_engine.regex import compile_regex


def _dfa(states: list[State], edges: list[tuple[str, str, str]]) -> Automaton:
    transitions = [
        Transition(f"t{index}", source, target, symbol)
        for index, (source, target, symbol) in enumerate(edges)
    ]
    return Automaton(states, transitions, Kind.DFA)


class TestChainFixtures:
    def test_distinguishable_chain_keeps_three_states(self, chain_dfa: Automaton, language_of) -> None:
        minimal = minimize(chain_dfa)
        assert len(minimal.states) == 3
        assert language_of(minimal, "a", 6) == language_of(chain_dfa, "a", 6)

    def test_refinement_rounds_for_chain(self, chain_dfa: Automaton) -> None:
        rounds = refine_partitions(chain_dfa)
        assert [sorted(map(sorted, partition)) for partition in rounds] == [
            [["q0", "q1"], ["q2"]],
            [["q0"], ["q1"], ["q2"]],
        ]

    def test_equivalent_accepting_states_merge(self, language_of) -> None:
        states = [
            State("q0", "q0", is_initial=True),
            State("q1", "q1", is_accepting=True),
            State("q2", "q2", is_accepting=True),
        ]
        dfa = _dfa(states, [("q0", "q1", "a"), ("q1", "q2", "a"), ("q2", "q2", "a")])
        rounds = refine_partitions(dfa)
        assert sorted(map(sorted, rounds[-1])) == [["q0"], ["q1", "q2"]]

        minimal = minimize(dfa)
        assert len(minimal.states) == 2
        assert minimal.initial_state.name == "q0"
        accepting = [state for state in minimal.states if state.is_accepting]
        assert [state.name for state in accepting] == ["{q1,q2}"]
        assert language_of(minimal, "a", 6) == language_of(dfa, "a", 6)


class TestPruning:
    def test_unreachable_states_are_dropped(self, chain_dfa: Automaton) -> None:
        states = list(chain_dfa.states) + [State("q9", "q9", is_accepting=True)]
        transitions = list(chain_dfa.transitions) + [Transition("t9", "q9", "q2", "a")]
        padded = Automaton(states, transitions, Kind.DFA)
        assert "q9" not in prune(padded)
        assert len(minimize(padded).states) == 3

    def test_trap_state_is_dropped(self) -> None:
        states = [
            State("q0", "q0", is_initial=True),
            State("q1", "q1", is_accepting=True),
            State("trap", "trap"),
        ]
        dfa = _dfa(
            states,
            [
                ("q0", "q1", "a"),
                ("q0", "trap", "b"),
                ("q1", "trap", "a"),
                ("q1", "trap", "b"),
                ("trap", "trap", "a"),
                ("trap", "trap", "b"),
            ],
        )
        minimal = minimize(dfa)
        assert len(minimal.states) == 2
        assert len(minimal.transitions) == 1

    def test_empty_language_keeps_the_initial_state(self) -> None:
        dfa = _dfa([State("q0", "q0", is_initial=True), State("q1", "q1")], [("q0", "q1", "a"), ("q1", "q0", "a")])
        minimal = minimize(dfa)
        assert len(minimal.states) == 1
        assert minimal.transitions == ()
        assert not minimal.states[0].is_accepting


class TestMinimalDfas:
    @pytest.mark.parametrize(
        ("pattern", "expected"),
        [
            ("(a|b)*abb", 4),
            ("a|b", 2),
            ("(ab|ba)*", 3),
            ("a*b*", 2),
            ("(a|b)*", 1),
            ("ε", 1),
        ],
    )
    def test_state_counts(self, pattern: str, expected: int, language_of) -> None:
        dfa = determinize(compile_regex(pattern))
        minimal = minimize(dfa)
        assert len(minimal.states) == expected
        assert minimal.kind is Kind.DFA
        assert minimal.is_deterministic()
        assert language_of(minimal, "ab", 6) == language_of(dfa, "ab", 6)

    def test_second_to_last_symbol(self, branching_nfa: Automaton, language_of) -> None:
        dfa = determinize(branching_nfa)
        minimal = minimize(dfa)
        assert len(dfa.states) == 5
        assert len(minimal.states) == 4
        assert language_of(minimal, "ab", 7) == language_of(branching_nfa, "ab", 7)

    @pytest.mark.parametrize("pattern", ["(a|b)*abb", "(ab|ba)*", "a(a|b)*b|b"])
    def test_idempotent(self, pattern: str) -> None:
        once = minimize(determinize(compile_regex(pattern)))
        twice = minimize(once)
        assert len(twice.states) == len(once.states)

    def test_initial_block_comes_first(self) -> None:
        minimal = minimize(determinize(compile_regex("(a|b)*abb")))
        assert minimal.states[0].is_initial
        assert minimal.states[0].id == "m0"


class TestFailures:
    def test_rejects_nfa(self, branching_nfa: Automaton) -> None:
        with pytest.raises(NotADfaError):
            minimize(branching_nfa)

    def test_rejects_nfa_even_when_structurally_deterministic(self) -> None:
        nfa = Automaton([State("q0", "q0", is_initial=True, is_accepting=True)], [], Kind.NFA)
        with pytest.raises(NotADfaError):
            minimize(nfa)

    def test_missing_initial_state(self) -> None:
        dfa = Automaton([State("q0", "q0", is_accepting=True)], [], Kind.DFA)
        with pytest.raises(MissingInitialStateError):
            minimize(dfa)

    def test_empty_dfa(self) -> None:
        assert minimize(Automaton.empty(Kind.DFA)) == Automaton.empty(Kind.DFA)
        assert refine_partitions(Automaton.empty(Kind.DFA)) == []
