from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from . import commands
from .analysis import (
    TOKEN_SPLIT_RE,
    TestCase,
    analyze_graph,
    cases_from_payload,
    load_test_cases,
    run_test_cases,
    split_word,
    summarize_results,
)
from .automata import Automaton, AutomatonError, Kind
from .graphviz import automaton_to_dot, read_dot
from .minimize import refine_partitions
from .serialization import dumps, from_payload
from .simulation import SimulatorStatus

logger = logging.getLogger(__name__)

EMPTY_INPUT_LABEL = "<empty>"
DOT_SUFFIXES = {".dot", ".gv"}


@dataclass
class Session:
    automaton: Automaton
    source: str
    test_cases: List[TestCase] = field(default_factory=list)


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING).",
    )

    output = argparse.ArgumentParser(add_help=False)
    output.add_argument(
        "--format",
        choices=["json", "dot"],
        default="json",
        help="Encoding of the produced automaton (default: json).",
    )
    output.add_argument(
        "--output",
        help="Write the produced automaton to this file instead of stdout.",
    )

    parser = argparse.ArgumentParser(
        description="Compile, determinize, minimize and simulate finite automata."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    regex = sub.add_parser(
        "regex", parents=[common, output], help="Compile a regular expression into an NFA."
    )
    regex.add_argument("pattern", help="Pattern using literals, ( ), *, | and ε.")
    regex.add_argument("--determinize", action="store_true", help="Determinize the NFA.")
    regex.add_argument(
        "--minimize", action="store_true", help="Determinize and minimize the NFA."
    )

    det = sub.add_parser(
        "determinize", parents=[common, output], help="Convert an automaton into a DFA."
    )
    det.add_argument("input", help="Automaton file (.json, or .dot/.gv).")

    mini = sub.add_parser("minimize", parents=[common, output], help="Minimize a DFA.")
    mini.add_argument("input", help="Automaton file (.json, or .dot/.gv).")
    mini.add_argument(
        "--steps", action="store_true", help="Print every partition refinement round."
    )

    sim = sub.add_parser(
        "simulate", parents=[common], help="Step an automaton through an input word."
    )
    sim.add_argument("input", help="Automaton file (.json, or .dot/.gv).")
    sim.add_argument(
        "word",
        nargs="?",
        default="",
        help="Input word; separate symbols with spaces or commas when they are longer than one character.",
    )

    check = sub.add_parser(
        "check", parents=[common], help="Report on an automaton and run its test cases."
    )
    check.add_argument("input", help="Automaton file (.json, or .dot/.gv).")
    check.add_argument(
        "--tests",
        help="Optional JSON file containing additional test cases to execute.",
    )
    check.add_argument(
        "--dot",
        help="Write a DOT graph highlighting the first test case's path to this file.",
    )
    return parser.parse_args(argv)


def run(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )
    handlers = {
        "regex": _cmd_regex,
        "determinize": _cmd_determinize,
        "minimize": _cmd_minimize,
        "simulate": _cmd_simulate,
        "check": _cmd_check,
    }
    try:
        return handlers[args.command](args)
    except KeyboardInterrupt:
        print("\nAborted by user.", file=sys.stderr)
        return 130
    except (
        AutomatonError,
        ValueError,
        FileNotFoundError,
        json.JSONDecodeError,
    ) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


# ---------------------------------------------------------------
def _cmd_regex(args: argparse.Namespace) -> int:
    automaton = commands.compile_regex(args.pattern)
    if args.determinize or args.minimize:
        automaton = commands.determinize(automaton)
    if args.minimize:
        automaton = commands.minimize(automaton)
    _emit(automaton, args.format, args.output)
    return 0


def _cmd_determinize(args: argparse.Namespace) -> int:
    session = load_session(Path(args.input))
    _emit(commands.determinize(session.automaton), args.format, args.output)
    return 0


def _cmd_minimize(args: argparse.Namespace) -> int:
    session = load_session(Path(args.input))
    result = commands.minimize(session.automaton)
    if args.steps:
        _display_rounds(session.automaton)
    _emit(result, args.format, args.output)
    return 0


def _cmd_simulate(args: argparse.Namespace) -> int:
    session = load_session(Path(args.input))
    automaton = session.automaton
    tokens = _parse_input_tokens(args.word, sorted(automaton.alphabet))
    handle = commands.simulation_start(automaton, tokens)
    print(f"start: {_format_states(automaton, handle.current_states)}")
    while handle.status is SimulatorStatus.RUNNING:
        symbol = handle.word[handle.position]
        commands.simulation_step(handle)
        print(f"{handle.position}: {symbol} -> {_format_states(automaton, handle.current_states)}")
    accepted = handle.accepted
    commands.simulation_stop(handle)
    print("ACCEPT" if accepted else "REJECT")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    session = load_session(Path(args.input))
    if args.tests:
        session.test_cases.extend(load_test_cases(args.tests))
    _display_summary(session)
    results = _run_tests(session)
    if args.dot:
        highlight_path = determine_highlight_path(session)
        Path(args.dot).write_text(
            automaton_to_dot(session.automaton, highlight_path=highlight_path) + "\n",
            encoding="utf-8",
        )
        print(f"\nDOT file written: {Path(args.dot).resolve()}")
    return 0 if all(result.passed for result in results) else 1


# ---------------------------------------------------------------
def load_session(path: Path) -> Session:
    if path.suffix.lower() in DOT_SUFFIXES:
        return Session(automaton=read_dot(str(path)), source=str(path))
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return build_session_from_payload(payload, source=str(path))


def build_session_from_payload(payload: Any, source: str = "<payload>") -> Session:
    if not isinstance(payload, dict):
        raise ValueError("Automaton file must define a JSON object.")
    automaton = from_payload(payload)
    test_cases = cases_from_payload(payload.get("test_cases"))
    logger.info("Loaded %r from %s", automaton, source)
    return Session(automaton=automaton, source=source, test_cases=test_cases)


def _emit(automaton: Automaton, fmt: str, output: Optional[str]) -> None:
    text = automaton_to_dot(automaton) if fmt == "dot" else dumps(automaton)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        logger.info("Wrote %s to %s", fmt, output)
    else:
        print(text)


def _format_states(automaton: Automaton, state_ids) -> str:
    if not state_ids:
        return "{}"
    return "{" + ", ".join(automaton.names_of(state_ids)) + "}"


def _display_rounds(automaton: Automaton) -> None:
    for index, partition in enumerate(refine_partitions(automaton)):
        blocks = " | ".join(
            ", ".join(automaton.names_of(block)) for block in partition
        )
        print(f"round {index}: {blocks}", file=sys.stderr)


def _display_summary(session: Session) -> None:
    automaton = session.automaton
    report = analyze_graph(automaton)
    print("Automaton Summary")
    print(f"  Kind: {automaton.kind.value}")
    print(f"  States: {', '.join(state.name for state in automaton.states)}")
    alphabet_text = ", ".join(sorted(automaton.alphabet)) if automaton.alphabet else "<empty>"
    print(f"  Alphabet: {alphabet_text}")
    initial = automaton.initial_state
    print(f"  Initial state: {initial.name if initial else '<none>'}")
    accepting = automaton.names_of(automaton.accepting_ids)
    print(f"  Accepting states: {', '.join(accepting) if accepting else '<none>'}")
    print("  Transition function:")
    for state in automaton.states:
        parts: List[str] = []
        for transition in automaton.transitions:
            if transition.source == state.id:
                parts.append(f"{transition.symbol}->{automaton.state(transition.target).name}")
        print(f"    {state.name}: {', '.join(parts) if parts else '<none>'}")
    print(f"  Deterministic: {'yes' if report['is_deterministic'] else 'no'}")
    if report["unreachable"]:
        print(f"  Unreachable: {', '.join(report['unreachable'])}")
    if report["dead_states"]:
        print(f"  Dead states: {', '.join(report['dead_states'])}")


def _run_tests(session: Session):
    if not session.test_cases:
        print("\nNo test cases were provided.")
        return []
    print("\nRunning test cases...")
    results = run_test_cases(session.automaton, session.test_cases)
    summary = summarize_results(results)
    errored = f" ({summary['errored']} errored)" if summary["errored"] else ""
    print(f"  Passed {summary['passed']} of {summary['total']} test cases.{errored}")
    for result in results:
        tokens_text = " ".join(result.case.tokens) if result.case.tokens else EMPTY_INPUT_LABEL
        expected_text = "accept" if result.case.expected else "reject"
        actual_text = result.error or ("accept" if result.actual else "reject")
        status = "PASS" if result.passed else "FAIL"
        label_prefix = f"{result.case.label}: " if result.case.label else ""
        print(
            f"    [{status}] {label_prefix}{tokens_text} -> expected {expected_text}, got {actual_text}"
        )
    return results


def determine_highlight_path(session: Session) -> List[Tuple[str, str]]:
    """Edges a DFA takes on the first test case."""
    if not session.test_cases:
        return []
    automaton = session.automaton
    if automaton.kind is not Kind.DFA:
        return []
    initial = automaton.initial_state
    if initial is None:
        return []
    path: List[Tuple[str, str]] = []
    current_state = initial.id
    for symbol in session.test_cases[0].tokens:
        destinations = automaton.transitions_from(current_state, symbol)
        if not destinations:
            break
        next_state = destinations[0]
        path.append((current_state, next_state))
        current_state = next_state
    return path


def _parse_input_tokens(raw: str, alphabet: Sequence[str]) -> List[str]:
    raw = raw.strip()
    if raw and not TOKEN_SPLIT_RE.search(raw) and any(len(symbol) > 1 for symbol in alphabet):
        return [raw]
    return list(split_word(raw))
