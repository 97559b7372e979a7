"""Simulating policies on problem models

The loop drives a policy against a model while tracking a belief:

    1. stop if the state is terminal or the step budget is exhausted
    2. pick an action given the belief
    3. accumulate (discounted) reward
    4. sample next state
    5. sample observation given (state, action, next state)
    6. update belief
    7. discount, and repeat

All samples are drawn from a single randomness source, threaded through
every call, and written into scratch objects that are allocated once per run.

Contains:
    * :class:`RolloutSimulator`: returns the discounted return
    * :class:`HistoryRecorder`: returns the complete trajectory
    * :func:`simulate`: the entry point routing to either
"""

import abc
from enum import Enum
from typing import Any, List, NamedTuple, Optional, Tuple

import numpy as np

from pomdp_protocols import core
from pomdp_protocols.configuration import SimulatorConfig, create_random_source
from pomdp_protocols.distributions import write_outcome
from pomdp_protocols.misc import LogLevel, POMDPLogger
from pomdp_protocols.preallocation import Scratch, allocate_scratch, detach


class SimulationStatus(Enum):
    """How a simulation run ended, both are normal completions"""

    TERMINATED = 0
    BUDGET_EXHAUSTED = 1


class Step(NamedTuple):
    """A single transition, detached from any scratch object

    ``belief`` is the belief *after* processing (``action``, ``observation``)
    """

    state: Any
    action: Any
    reward: float
    next_state: Any
    observation: Any
    belief: Any


class SimulationHistory(NamedTuple):
    """The record of a simulation run"""

    steps: List[Step]
    discounted_reward: float
    status: SimulationStatus

    @property
    def num_steps(self) -> int:
        """number of transitions in the run"""
        return len(self.steps)

    @property
    def undiscounted_reward(self) -> float:
        """sum of the rewards of all steps"""
        return float(sum(step.reward for step in self.steps))


class Simulator(POMDPLogger, abc.ABC):
    """Base class of simulators, implements the actual loop"""

    def __init__(
        self,
        config: SimulatorConfig = SimulatorConfig(),
        rng: Optional[np.random.Generator] = None,
    ):
        """Creates a simulator

        Raises :class:`core.ConfigurationError` if ``config`` is invalid. The
        level of logging (``config.verbose``) is left to the caller, see
        :meth:`POMDPLogger.set_level`

        Args:
             config: (`SimulatorConfig`):
             rng: (`Optional[np.random.Generator]`): source of randomness, created from ``config.seed`` if not given

        """
        self.config = config.validate()
        POMDPLogger.__init__(self)

        self.rng = rng if rng is not None else create_random_source(config.seed)

    @abc.abstractmethod
    def simulate(
        self,
        model: core.POMDP,
        policy: core.Policy,
        updater: core.BeliefUpdater,
        initial_belief: Any = None,
        initial_state: Any = None,
        scratch: Optional[Scratch] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> Any:
        """runs a single simulation

        Args:
             model: (`core.POMDP`):
             policy: (`core.Policy`):
             updater: (`core.BeliefUpdater`):
             initial_belief: (`Any`): defaults to ``model.initial_state_distribution()``
             initial_state: (`Any`): sampled from ``initial_belief`` if not given
             scratch: (`Optional[Scratch]`): allocated if not given
             rng: (`Optional[np.random.Generator]`): source of randomness of this run, defaults to that of ``self``

        """

    def _run(
        self,
        model: core.POMDP,
        policy: core.Policy,
        updater: core.BeliefUpdater,
        initial_belief: Any,
        initial_state: Any,
        scratch: Optional[Scratch],
        rng: Optional[np.random.Generator],
        record: Optional[List[Step]],
    ) -> Tuple[float, SimulationStatus]:
        """the simulation loop, appends detached steps to ``record`` if given

        Nothing is caught here: errors of the model, policy or updater abort
        the run.

        RETURNS (`Tuple[float, SimulationStatus]`): discounted return and how the run ended

        """

        # everything that can be mis-configured is checked before stepping
        gamma = core.discount(model)
        form = core.reward_form(model)
        max_steps = self.config.max_steps

        if rng is None:
            rng = self.rng

        if initial_belief is None:
            initial_belief = model.initial_state_distribution()

        if scratch is None:
            scratch = allocate_scratch(model, updater)

        if self.log_is_on(LogLevel.V1):
            self.log(
                LogLevel.V1,
                f"Simulating {policy} on {model} ({updater}) for {max_steps} steps",
            )

        if initial_state is None:
            state = core.sample(rng, scratch.state, initial_belief)
        else:
            state = write_outcome(initial_state, scratch.state)
        belief = core.convert_belief(updater, initial_belief, scratch.belief)

        spare_state, spare_belief = scratch.next_state, scratch.next_belief
        transition_distr = scratch.transition_distribution
        observation_distr = scratch.observation_distribution

        discounted_return = 0.0
        discount = 1.0  # discount accumulates by multiplying with gamma
        time = 0

        while True:

            if core.is_terminal(model, state):
                status = SimulationStatus.TERMINATED
                break
            if time >= max_steps:
                status = SimulationStatus.BUDGET_EXHAUSTED
                break

            action = write_outcome(core.action(policy, belief, rng), scratch.action)

            if form == core.RewardForm.EXPECTED:
                reward = core.reward(model, state, action)

            # ``spare_state`` holds no live value: the state it held has been consumed
            next_state = core.sample(
                rng, spare_state, model.transition(state, action, transition_distr)
            )

            if form == core.RewardForm.REALIZED:
                reward = core.reward(model, state, action, next_state)

            observation = core.sample(
                rng,
                scratch.observation,
                model.observation(state, action, next_state, observation_distr),
            )

            next_belief = core.update(updater, belief, action, observation, spare_belief)

            discounted_return += discount * reward

            if record is not None:
                record.append(
                    Step(
                        detach(state),
                        detach(action),
                        reward,
                        detach(next_state),
                        detach(observation),
                        detach(next_belief),
                    )
                )

            if self.log_is_on(LogLevel.V4):
                self.log(
                    LogLevel.V4,
                    f"t={time}: a({action}) in s({state}) -> s'({next_state}), "
                    f"o({observation}), r({reward})",
                )

            # swap buffers, unless the result was not written into the spare one
            if next_state is spare_state:
                spare_state = state
            state = next_state

            if next_belief is spare_belief:
                spare_belief = belief
            belief = next_belief

            discount *= gamma
            time += 1

        if self.log_is_on(LogLevel.V2):
            self.log(
                LogLevel.V2,
                f"Run ended ({status.name}) after {time} steps with return {discounted_return}",
            )

        return discounted_return, status


class RolloutSimulator(Simulator):
    """Simulates and returns only the discounted return"""

    def simulate(
        self,
        model: core.POMDP,
        policy: core.Policy,
        updater: core.BeliefUpdater,
        initial_belief: Any = None,
        initial_state: Any = None,
        scratch: Optional[Scratch] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> float:
        """runs a simulation, returns the discounted return

        RETURNS (`float`):

        """
        discounted_return, _ = self._run(
            model, policy, updater, initial_belief, initial_state, scratch, rng, None
        )
        return discounted_return

    def __repr__(self) -> str:
        return f"RolloutSimulator (max steps {self.config.max_steps})"


class HistoryRecorder(Simulator):
    """Simulates and records the trajectory

    Every recorded value is a copy, so the history remains valid after the
    scratch objects of the run are re-used.
    """

    def simulate(
        self,
        model: core.POMDP,
        policy: core.Policy,
        updater: core.BeliefUpdater,
        initial_belief: Any = None,
        initial_state: Any = None,
        scratch: Optional[Scratch] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> SimulationHistory:
        """runs a simulation, returns its history

        RETURNS (`SimulationHistory`):

        """
        steps: List[Step] = []
        discounted_return, status = self._run(
            model, policy, updater, initial_belief, initial_state, scratch, rng, steps
        )
        return SimulationHistory(steps, discounted_return, status)

    def __repr__(self) -> str:
        return f"HistoryRecorder (max steps {self.config.max_steps})"


def simulate(
    simulator: Simulator,
    model: core.POMDP,
    policy: core.Policy,
    updater: core.BeliefUpdater,
    initial_belief: Any = None,
) -> Any:
    """simulates ``policy`` on ``model``, tracking beliefs with ``updater``

    Args:
         simulator: (`Simulator`): determines what is returned
         model: (`core.POMDP`):
         policy: (`core.Policy`):
         updater: (`core.BeliefUpdater`):
         initial_belief: (`Any`): defaults to ``model.initial_state_distribution()``

    RETURNS (`Any`): discounted return (:class:`RolloutSimulator`) or :class:`SimulationHistory` (:class:`HistoryRecorder`)

    """
    return simulator.simulate(model, policy, updater, initial_belief)
