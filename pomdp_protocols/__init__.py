"""Protocols for POMDPs, and the simulation of policies on them"""

from .configuration import SimulatorConfig, create_random_source, parse_arguments
from .core import (
    POMDP,
    BeliefUpdater,
    ConfigurationError,
    ConversionError,
    Distribution,
    DomainError,
    Policy,
    RewardForm,
    Solver,
)
from .evaluation import EvaluationResult, evaluate_policy
from .simulation import (
    HistoryRecorder,
    RolloutSimulator,
    SimulationHistory,
    SimulationStatus,
    simulate,
)
