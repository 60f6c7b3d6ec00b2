"""Structural JSON encoding of automata.

Only states, transitions and the kind are stored; the alphabet is always
derived again when loading. Payloads exported by the browser editor
(``type``/``isInitial``/``isAccepting``/``input`` keys, comma separated
labels, layout fields) are accepted as well.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from .automata import Automaton, Kind, State, Transition, expand_edge


def to_payload(automaton: Automaton) -> Dict[str, Any]:
    return {
        "kind": automaton.kind.value,
        "states": [
            {
                "id": state.id,
                "name": state.name,
                "is_initial": state.is_initial,
                "is_accepting": state.is_accepting,
            }
            for state in automaton.states
        ],
        "transitions": [
            {
                "id": transition.id,
                "from": transition.source,
                "to": transition.target,
                "symbol": transition.symbol,
            }
            for transition in automaton.transitions
        ],
    }


def from_payload(payload: Mapping[str, Any]) -> Automaton:
    if not isinstance(payload, Mapping):
        raise ValueError("Automaton payload must be a mapping.")

    raw_kind = payload.get("kind", payload.get("type"))
    try:
        kind = Kind(str(raw_kind).upper())
    except ValueError as exc:
        raise ValueError("Field 'kind' must be either 'DFA' or 'NFA'.") from exc

    raw_states = payload.get("states")
    if not isinstance(raw_states, list):
        raise ValueError("Field 'states' must be a list.")
    states = [_state_from_entry(entry, index) for index, entry in enumerate(raw_states)]

    raw_transitions = payload.get("transitions", [])
    if not isinstance(raw_transitions, list):
        raise ValueError("Field 'transitions' must be a list.")
    transitions: List[Transition] = []
    for index, entry in enumerate(raw_transitions):
        transitions.extend(_transitions_from_entry(entry, index))

    return Automaton(states, transitions, kind)


def _state_from_entry(entry: Any, index: int) -> State:
    if not isinstance(entry, Mapping):
        raise ValueError(f"State #{index} must be an object.")
    state_id = _require_string(entry, "id", f"State #{index}")
    name = entry.get("name", state_id)
    if not isinstance(name, str):
        raise ValueError(f"State #{index} field 'name' must be a string.")
    return State(
        id=state_id,
        name=name,
        is_initial=_optional_flag(entry, ("is_initial", "isInitial"), f"State #{index}"),
        is_accepting=_optional_flag(entry, ("is_accepting", "isAccepting"), f"State #{index}"),
    )


def _transitions_from_entry(entry: Any, index: int) -> List[Transition]:
    context = f"Transition #{index}"
    if not isinstance(entry, Mapping):
        raise ValueError(f"{context} must be an object.")
    transition_id = _require_string(entry, "id", context)
    source = _require_string(entry, "from", context)
    target = _require_string(entry, "to", context)
    if "symbol" in entry:
        return [Transition(transition_id, source, target, _require_string(entry, "symbol", context))]
    label = _require_string(entry, "input", context)
    return expand_edge(transition_id, source, target, label)


def _require_string(entry: Mapping[str, Any], key: str, context: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{context} field '{key}' must be a non-empty string.")
    return value


def _optional_flag(entry: Mapping[str, Any], keys: Tuple[str, ...], context: str) -> bool:
    for key in keys:
        if key in entry:
            value = entry[key]
            if not isinstance(value, bool):
                raise ValueError(f"{context} field '{key}' must be true or false.")
            return value
    return False


def dumps(automaton: Automaton, *, indent: int = 2) -> str:
    return json.dumps(to_payload(automaton), indent=indent, ensure_ascii=False)


def loads(text: str) -> Automaton:
    return from_payload(json.loads(text))


def dump(automaton: Automaton, path: Union[str, Path]) -> Path:
    target = Path(path)
    with open(target, "w", encoding="utf-8") as handle:
        handle.write(dumps(automaton) + "\n")
    return target


def load(path: Union[str, Path]) -> Automaton:
    with open(path, "r", encoding="utf-8") as handle:
        return from_payload(json.load(handle))
