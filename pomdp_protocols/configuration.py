"""Configurations of simulations

Simulations are configured by a :class:`SimulatorConfig`. It can be created
directly, or parsed from a list of (command line) arguments through
:func:`parse_arguments`.
"""

from argparse import ArgumentDefaultsHelpFormatter, ArgumentParser
from typing import List, NamedTuple, Optional

import numpy as np

from pomdp_protocols.core import ConfigurationError

DEFAULT_MAX_STEPS = 100


class SimulatorConfig(NamedTuple):
    """Configurations of a simulator

    max_steps: bound on the number of steps of a single run
    seed: seed of the randomness source, ``None`` means entropy from the OS
    verbose: level of logging in [0 ... 5], applied by the driver of the
        simulations (e.g. :func:`pomdp_protocols.evaluation.evaluate_policy`)
    """

    max_steps: int = DEFAULT_MAX_STEPS
    seed: Optional[int] = None
    verbose: int = 0

    def validate(self) -> "SimulatorConfig":
        """checks ``self``, raises :class:`ConfigurationError` if invalid

        RETURNS (`SimulatorConfig`): ``self``

        """

        if not isinstance(self.max_steps, (int, np.integer)) or self.max_steps < 1:
            raise ConfigurationError(
                f"max_steps must be a positive integer, not {self.max_steps}"
            )

        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must be non-negative, not {self.seed}")

        if not isinstance(self.verbose, (int, np.integer)) or not 0 <= self.verbose <= 5:
            raise ConfigurationError(f"verbose must be in [0 ... 5], not {self.verbose}")

        return self


def create_random_source(seed: Optional[int] = None) -> np.random.Generator:
    """creates the randomness source of a simulation run

    The same ``seed`` results in the same sequence of samples

    Args:
         seed: (`Optional[int]`): ``None`` to seed from the OS

    RETURNS (`np.random.Generator`):

    """
    return np.random.default_rng(seed)


def spawn_random_sources(seed: Optional[int], n: int) -> List[np.random.Generator]:
    """creates ``n`` independent randomness sources from a single ``seed``

    Used to give each (concurrent) run its own source, while keeping the
    collection of runs reproducible

    Args:
         seed: (`Optional[int]`):
         n: (`int`): number of sources

    RETURNS (`List[np.random.Generator]`):

    """
    return [np.random.default_rng(s) for s in np.random.SeedSequence(seed).spawn(n)]


def parse_arguments(args: Optional[List[str]] = None) -> SimulatorConfig:
    """converts arguments from commandline (or string) to configurations

    Args:
         args: (`Optional[List[str]]`): a string of arguments, uses cmdline if None

    RETURNS (`SimulatorConfig`): validated configurations

    """
    parser = ArgumentParser(formatter_class=ArgumentDefaultsHelpFormatter)

    parser.add_argument(
        "--verbose",
        "-v",
        choices=[0, 1, 2, 3, 4, 5],
        default=0,
        type=int,
        help="level of logging",
    )

    parser.add_argument(
        "--max_steps",
        "-H",
        default=DEFAULT_MAX_STEPS,
        type=int,
        help="maximum number of steps in a simulation",
    )

    parser.add_argument(
        "--random_seed", "--seed", default=None, type=int, help="set random seed"
    )

    parsed_args = parser.parse_args(args)

    return SimulatorConfig(
        max_steps=parsed_args.max_steps,
        seed=parsed_args.random_seed,
        verbose=parsed_args.verbose,
    ).validate()
