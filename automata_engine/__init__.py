from .automata import (
    EPSILON,
    Automaton,
    AutomatonError,
    AutomatonValidationError,
    InvalidSimulatorStateError,
    Kind,
    MissingInitialStateError,
    NotADfaError,
    RegexSyntaxError,
    State,
    Transition,
    UnknownSymbolError,
)
from .cli import build_session_from_payload, run
from .determinize import determinize
from .minimize import minimize, refine_partitions
from .regex import compile_regex
from .simulation import Simulator, SimulatorStatus, accepts

__all__ = [
    "EPSILON",
    "Automaton",
    "AutomatonError",
    "AutomatonValidationError",
    "InvalidSimulatorStateError",
    "Kind",
    "MissingInitialStateError",
    "NotADfaError",
    "RegexSyntaxError",
    "Simulator",
    "SimulatorStatus",
    "State",
    "Transition",
    "UnknownSymbolError",
    "accepts",
    "build_session_from_payload",
    "compile_regex",
    "determinize",
    "minimize",
    "refine_partitions",
    "run",
]
