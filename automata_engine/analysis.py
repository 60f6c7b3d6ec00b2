from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Set, Tuple, Union

from .automata import Automaton, AutomatonError
from .simulation import accepts

TOKEN_SPLIT_RE = re.compile(r"[\s,]+")


@dataclass(frozen=True)
class TestCase:
    __test__ = False

    tokens: Tuple[str, ...]
    expected: bool
    label: str = ""

    @staticmethod
    def from_raw(raw_tokens: Iterable[str] | str, expected: bool, label: str = "") -> "TestCase":
        return TestCase(tokens=tuple(raw_tokens), expected=expected, label=label)


@dataclass(frozen=True)
class TestResult:
    __test__ = False

    case: TestCase
    actual: bool
    error: str = ""

    @property
    def passed(self) -> bool:
        return not self.error and self.actual == self.case.expected


def split_word(raw: str) -> Tuple[str, ...]:
    """Split a typed word into symbols.

    Spaces or commas separate multi-character symbols; a word without either
    is read one symbol per character.
    """
    raw = raw.strip()
    if not raw:
        return ()
    if TOKEN_SPLIT_RE.search(raw):
        return tuple(token for token in TOKEN_SPLIT_RE.split(raw) if token)
    return tuple(raw)


def cases_from_payload(data: Any) -> List[TestCase]:
    """Read test cases from a list, or from an object with a ``cases`` list.

    Each entry is ``{"input": str | [str, ...], "expected": bool, "label": str}``;
    ``label`` defaults to ``case N``.
    """
    if data is None:
        return []
    entries = data.get("cases", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError("Test cases must be provided as a list.")
    return [_case_from_entry(entry, number) for number, entry in enumerate(entries, start=1)]


def load_test_cases(path: Union[str, Path]) -> List[TestCase]:
    with open(path, "r", encoding="utf-8") as handle:
        return cases_from_payload(json.load(handle))


def _case_from_entry(entry: Any, number: int) -> TestCase:
    context = f"Test case #{number}"
    if not isinstance(entry, dict):
        raise ValueError(f"{context} must be an object with 'input' and 'expected'.")
    expected = entry.get("expected")
    if not isinstance(expected, bool):
        raise ValueError(f"{context} field 'expected' must be true or false.")
    label = entry.get("label") or f"case {number}"
    if not isinstance(label, str):
        raise ValueError(f"{context} field 'label' must be a string.")

    raw = entry.get("input", [])
    if isinstance(raw, str):
        tokens = split_word(raw)
    elif isinstance(raw, list) and all(isinstance(token, str) for token in raw):
        tokens = tuple(token.strip() for token in raw)
    else:
        raise ValueError(f"{context} field 'input' must be a string or a list of strings.")
    return TestCase(tokens=tokens, expected=expected, label=label)


def run_test_cases(automaton: Automaton, test_cases: Sequence[TestCase]) -> List[TestResult]:
    results: List[TestResult] = []
    for case in test_cases:
        try:
            actual = accepts(automaton, case.tokens)
        except AutomatonError as exc:
            results.append(TestResult(case=case, actual=False, error=str(exc)))
            continue
        results.append(TestResult(case=case, actual=actual))
    return results


def summarize_results(results: Sequence[TestResult]) -> Dict[str, int]:
    """Count results; a case that raised is ``errored``, not ``failed``."""
    errored = sum(1 for result in results if result.error)
    passed = sum(1 for result in results if result.passed)
    return {
        "total": len(results),
        "passed": passed,
        "failed": len(results) - passed - errored,
        "errored": errored,
    }


def analyze_graph(automaton: Automaton) -> Dict[str, object]:
    state_ids = {state.id for state in automaton.states}
    reachable = automaton.reachable_ids()
    alive = automaton.live_ids()
    alphabet = sorted(automaton.alphabet)

    missing: List[Tuple[str, str]] = []
    nondeterministic: Set[str] = set()
    for state in automaton.states:
        for symbol in alphabet:
            destinations = automaton.transitions_from(state.id, symbol)
            if not destinations:
                missing.append((state.name, symbol))
            if len(destinations) > 1:
                nondeterministic.add(state.name)

    has_epsilon = any(transition.is_epsilon for transition in automaton.transitions)
    for transition in automaton.transitions:
        if transition.is_epsilon:
            nondeterministic.add(automaton.state(transition.source).name)

    report: Dict[str, object] = {
        "kind": automaton.kind.value,
        "state_count": len(automaton.states),
        "reachable_count": len(reachable),
        "unreachable": automaton.names_of(state_ids - reachable),
        "dead_states": automaton.names_of(state_ids - alive),
        "missing_symbols": missing,
        "nondeterministic_states": sorted(nondeterministic),
        "transition_count": len(automaton.transitions),
        "alphabet": alphabet,
        "is_total": not missing,
        "is_deterministic": automaton.is_deterministic(),
        "has_epsilon": has_epsilon,
    }
    return report
