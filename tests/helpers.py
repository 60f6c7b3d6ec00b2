from __future__ import annotations

from itertools import product
from typing import Iterable, Iterator, Tuple

from automata_engine.automata import Automaton
from automata_engine.simulation import Simulator


def all_words(alphabet: Iterable[str], max_length: int) -> Iterator[Tuple[str, ...]]:
    symbols = sorted(alphabet)
    for length in range(max_length + 1):
        yield from product(symbols, repeat=length)


def run_word(automaton: Automaton, word: Tuple[str, ...]) -> bool:
    """Run without alphabet validation so foreign symbols simply reject."""
    return Simulator(automaton).start(word).run()
