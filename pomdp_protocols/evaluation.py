"""Monte Carlo evaluation of policies

Runs are independent: each gets its own randomness source (spawned from the
configured seed) and its own scratch objects, while the model and policy are
shared read-only. Hence runs can be distributed over concurrent workers
without changing the results.
"""

from concurrent.futures import ThreadPoolExecutor
from math import sqrt
from typing import Any, Callable, List, NamedTuple, Optional

import numpy as np

from pomdp_protocols import core
from pomdp_protocols.configuration import SimulatorConfig, spawn_random_sources
from pomdp_protocols.misc import LogLevel, POMDPLogger
from pomdp_protocols.simulation import RolloutSimulator


class EvaluationResult(NamedTuple):
    """Statistics over the returns of a number of runs"""

    returns: List[float]
    mean: float
    variance: float
    stderr: float


def summarize(returns: List[float]) -> EvaluationResult:
    """computes mean, variance and standard error of ``returns``

    Uses the running (Welford) update of mean and variance

    Args:
         returns: (`List[float]`):

    RETURNS (`EvaluationResult`):

    """

    ret_mean = ret_m2 = 0.0

    for run, ret in enumerate(returns):
        # update mean and variance
        delta = ret - ret_mean
        ret_mean += delta / (run + 1)
        delta_2 = ret - ret_mean
        ret_m2 += delta * delta_2

    num_runs = len(returns)
    ret_var = 0.0 if num_runs < 2 else ret_m2 / (num_runs - 1)
    stder = 0.0 if num_runs < 2 else sqrt(ret_var / num_runs)

    return EvaluationResult(list(returns), ret_mean, ret_var, stder)


def evaluate_policy(
    model: core.POMDP,
    policy: core.Policy,
    updater_factory: Callable[[], core.BeliefUpdater],
    config: SimulatorConfig,
    num_runs: int,
    initial_belief: Any = None,
    max_workers: Optional[int] = None,
) -> EvaluationResult:
    """Estimates the value of ``policy`` by simulating it ``num_runs`` times

    The results depend only on ``config.seed``, not on ``max_workers``. A
    non-zero ``config.verbose`` sets the level of logging (once, for all runs)

    Args:
         model: (`core.POMDP`): shared, read-only
         policy: (`core.Policy`): shared, read-only
         updater_factory: (`Callable[[], core.BeliefUpdater]`): creates an updater per run
         config: (`SimulatorConfig`):
         num_runs: (`int`): number of simulations
         initial_belief: (`Any`): defaults to ``model.initial_state_distribution()``
         max_workers: (`Optional[int]`): runs concurrently if larger than 1

    RETURNS (`EvaluationResult`):

    """

    if num_runs < 1:
        raise core.ConfigurationError(f"number of runs must be positive, not {num_runs}")

    config.validate()
    core.discount(model)

    if config.verbose:
        POMDPLogger.set_level(LogLevel.create(config.verbose))

    logger = POMDPLogger("evaluation")

    # one simulator for all runs, each run is given its own randomness source
    simulator = RolloutSimulator(config)
    rngs = spawn_random_sources(config.seed, num_runs)

    def run(rng: np.random.Generator) -> float:
        return simulator.simulate(model, policy, updater_factory(), initial_belief, rng=rng)

    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            returns = list(executor.map(run, rngs))
    else:
        returns = [run(rng) for rng in rngs]

    result = summarize(returns)

    if logger.log_is_on(LogLevel.V1):
        logger.log(
            LogLevel.V1,
            f"{num_runs} runs of {policy} on {model}: "
            f"avg return {result.mean} (stderr {result.stderr})",
        )

    return result


def discounted_return(rewards: List[float], gamma: float) -> float:
    """returns sum_t gamma^t * rewards[t]"""
    return float(np.dot(rewards, np.power(gamma, np.arange(len(rewards)))))
