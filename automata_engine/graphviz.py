from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .automata import Automaton, Kind, State, Transition, expand_edge

START_NODE = "__start__"
START_MARKERS = frozenset({START_NODE, "start"})
INITIAL_SUFFIX = " (initial)"

_ID = r'(?:"((?:[^"\\]|\\.)*)"|(\w+))'
_ATTR_LIST = r'\[((?:"(?:[^"\\]|\\.)*"|[^\]"])*)\]'
_HEADER_RE = re.compile(r"^digraph\s*" + _ID + r"?\s*\{$")
_NODE_RE = re.compile(r"^" + _ID + r"\s*" + _ATTR_LIST + r"\s*;?$")
_EDGE_RE = re.compile(r"^" + _ID + r"\s*->\s*" + _ID + r"\s*(?:" + _ATTR_LIST + r")?\s*;?$")
_DEFAULTS_RE = re.compile(r"^(?:graph|node|edge)\s*" + _ATTR_LIST + r"\s*;?$")
_GRAPH_ATTR_RE = re.compile(r'^\w+\s*=\s*(?:"(?:[^"\\]|\\.)*"|[\w.]+)\s*;?$')
_ATTR_RE = re.compile(r'(\w+)\s*=\s*("(?:[^"\\]|\\.)*"|[\w.]+)')


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return _unescape(text[1:-1])
    return text


def automaton_to_dot(
    automaton: Automaton,
    *,
    graph_name: str = "",
    rankdir: str = "LR",
    highlight_path: Sequence[Tuple[str, str]] = (),
) -> str:
    """Return a Graphviz DOT representation for the provided automaton.

    Nodes are keyed by state id and labelled with the state name; parallel
    edges are merged into one edge with a comma separated label.
    """
    highlight_edges = set(highlight_path)
    name = graph_name or automaton.kind.value

    lines: List[str] = [f"digraph {_quote(name)} {{"]
    lines.append(f"  rankdir={rankdir};")
    lines.append("  node [shape=circle];")

    for state in automaton.states:
        shape = "doublecircle" if state.is_accepting else "circle"
        lines.append(f"  {_quote(state.id)} [label={_quote(state.name)}, shape={shape}];")

    initial = automaton.initial_state
    if initial is not None:
        lines.append(f"  {START_NODE} [shape=point];")
        lines.append(f"  {START_NODE} -> {_quote(initial.id)};")

    for source, destination, labels in _collect_edges(automaton.transitions):
        attributes = [f"label={_quote(', '.join(labels))}"]
        if (source, destination) in highlight_edges:
            attributes.append('color="red"')
            attributes.append('fontcolor="red"')
        attr_text = ", ".join(attributes)
        lines.append(f"  {_quote(source)} -> {_quote(destination)} [{attr_text}];")

    lines.append("}")
    return "\n".join(lines)


def _collect_edges(transitions: Iterable[Transition]) -> Iterable[Tuple[str, str, List[str]]]:
    grouped: Dict[Tuple[str, str], List[str]] = {}
    for transition in transitions:
        labels = grouped.setdefault((transition.source, transition.target), [])
        if transition.symbol not in labels:
            labels.append(transition.symbol)
    for (source, destination), labels in sorted(grouped.items()):
        labels.sort()
        yield source, destination, labels


def write_dot(automaton: Automaton, path: str, **kwargs) -> str:
    """Generate a DOT file at `path` and return the path."""
    dot = automaton_to_dot(automaton, **kwargs)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(dot + "\n")
    return path


def automaton_from_dot(text: str) -> Automaton:
    """Parse DOT produced by :func:`automaton_to_dot` back into an automaton.

    The browser editor's export is read too: bare ids, a ``start`` marker
    node and a `` (initial)`` suffix on the initial state's label. Edge
    labels are expanded into one transition per symbol. The kind comes from
    the graph name when it is ``DFA`` or ``NFA``; otherwise the result is an
    NFA. Any statement outside those forms raises ValueError.
    """
    kind = None
    closed = False
    nodes: Dict[str, Dict[str, str]] = {}
    edges: List[Tuple[str, str, str]] = []
    initial_ids: List[str] = []
    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("//"):
            continue
        if kind is None:
            header = _HEADER_RE.match(line)
            if not header:
                raise ValueError(f"Line {number}: expected 'digraph <name> {{', got {line!r}.")
            name = _unescape(header.group(1)) if header.group(1) is not None else header.group(2)
            kind = Kind(name) if name in ("DFA", "NFA") else Kind.NFA
            continue
        if closed:
            raise ValueError(f"Line {number}: unexpected text after the closing '}}'.")
        if line == "}":
            closed = True
            continue
        if _DEFAULTS_RE.match(line) or _GRAPH_ATTR_RE.match(line):
            continue

        edge = _EDGE_RE.match(line)
        if edge:
            source, source_is_marker = _node_id(edge.group(1), edge.group(2))
            target, _ = _node_id(edge.group(3), edge.group(4))
            if source_is_marker:
                initial_ids.append(target)
                continue
            attrs = _parse_attrs(edge.group(5) or "")
            if "label" not in attrs:
                raise ValueError(f"Line {number}: DOT edge without a label: {line}")
            edges.append((source, target, attrs["label"]))
            continue

        node = _NODE_RE.match(line)
        if node:
            state_id, is_marker = _node_id(node.group(1), node.group(2))
            if not is_marker:
                nodes[state_id] = _parse_attrs(node.group(3))
            continue
        raise ValueError(f"Line {number}: unrecognised DOT statement {line!r}.")

    if kind is None:
        raise ValueError("DOT text has no 'digraph' header.")
    if not closed:
        raise ValueError("DOT graph is missing its closing '}'.")
    if not nodes:
        raise ValueError("DOT graph defines no states.")

    states = []
    for state_id, attrs in nodes.items():
        label = attrs.get("label", state_id)
        marked = label.endswith(INITIAL_SUFFIX)
        if marked:
            label = label[: -len(INITIAL_SUFFIX)]
        states.append(
            State(
                state_id,
                label,
                is_initial=marked or state_id in initial_ids,
                is_accepting=attrs.get("shape") == "doublecircle",
            )
        )
    transitions: List[Transition] = []
    for index, (source, target, label) in enumerate(edges):
        transitions.extend(expand_edge(f"t{index}", source, target, label))
    return Automaton(states, transitions, kind)


def _node_id(quoted: Optional[str], bare: Optional[str]) -> Tuple[str, bool]:
    """Return the node id and whether it names a start marker."""
    if quoted is not None:
        return _unescape(quoted), False
    return bare, bare in START_MARKERS


def _parse_attrs(text: str) -> Dict[str, str]:
    return {key: _unquote(value) for key, value in _ATTR_RE.findall(text)}


def read_dot(path: str) -> Automaton:
    with open(path, "r", encoding="utf-8") as handle:
        return automaton_from_dot(handle.read())
