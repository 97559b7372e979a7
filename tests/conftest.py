"""Problem models used throughout the tests"""

from typing import List

import numpy as np
import pytest

from pomdp_protocols.core import DomainError, RewardForm
from pomdp_protocols.distributions import Deterministic, SparseCategorical, Uniform
from pomdp_protocols.misc import DiscreteSpace


class ConstantModel:
    """1 state, 2 actions, reward +1 for action 0 and -1 for action 1

    Counts calls to :meth:`transition` and :meth:`observation`
    """

    REWARDS = [1.0, -1.0]

    def __init__(self, gamma: float = 0.9, terminal: bool = False):
        self.gamma = gamma
        self.terminal = terminal
        self.num_transitions = 0
        self.num_observations = 0

    def states(self) -> List[int]:
        return [0]

    def actions(self, state=None, out=None):  # pylint: disable=unused-argument
        return [0, 1]

    def observations(self, state=None, out=None):  # pylint: disable=unused-argument
        return [0]

    def reward(self, state, action, next_state=None):  # pylint: disable=unused-argument
        if action not in (0, 1):
            raise DomainError(f"{action} is not an action")
        return self.REWARDS[action]

    def transition(self, state, action, out):  # pylint: disable=unused-argument
        self.num_transitions += 1
        return out.fill(0)

    def observation(self, state, action, next_state, out):  # pylint: disable=unused-argument
        self.num_observations += 1
        return out.fill(0)

    def discount(self) -> float:
        return self.gamma

    def is_terminal(self, state) -> bool:  # pylint: disable=unused-argument
        return self.terminal

    def initial_state_distribution(self):
        return Deterministic(0)

    def create_state(self):
        return 0

    def create_action(self):
        return 0

    def create_observation(self):
        return 0

    def create_transition_distribution(self):
        return Deterministic()

    def create_observation_distribution(self):
        return Deterministic()

    def __repr__(self) -> str:
        return "ConstantModel"


class NoisyChain:
    """A chain of ``length`` cells, states and observations are arrays

    Moving right (1) or left (0) slips with probability ``slip``, the last
    cell is terminal. Reaching it gives 10, every other step -1 (realized
    reward). The position is observed correctly with probability 0.8,
    otherwise a neighbouring cell is observed.
    """

    reward_form = RewardForm.REALIZED

    def __init__(self, length: int = 5, slip: float = 0.2, gamma: float = 0.95):
        self.length = length
        self.slip = slip
        self.gamma = gamma
        self._space = DiscreteSpace([length])

    def states(self):
        return self._space

    def actions(self, state=None, out=None):  # pylint: disable=unused-argument
        return [0, 1]

    def observations(self, state=None, out=None):  # pylint: disable=unused-argument
        return self._space

    def _clip(self, pos: int) -> np.ndarray:
        return np.array([min(max(pos, 0), self.length - 1)])

    def reward(self, state, action, next_state=None):  # pylint: disable=unused-argument
        return 10.0 if next_state[0] == self.length - 1 else -1.0

    def transition(self, state, action, out):
        if action not in (0, 1):
            raise DomainError(f"{action} is not an action")

        step = 1 if action == 1 else -1
        return out.fill(
            [self._clip(state[0] + step), self._clip(state[0] - step)],
            [1 - self.slip, self.slip],
        )

    def observation(self, state, action, next_state, out):  # pylint: disable=unused-argument
        pos = next_state[0]
        return out.fill(
            [self._clip(pos), self._clip(pos - 1), self._clip(pos + 1)], [0.8, 0.1, 0.1]
        )

    def discount(self) -> float:
        return self.gamma

    def is_terminal(self, state) -> bool:
        return bool(state[0] == self.length - 1)

    def initial_state_distribution(self):
        return Uniform([np.array([i]) for i in range(self.length - 1)])

    def create_state(self):
        return np.zeros(1, dtype=int)

    def create_action(self):
        return 0

    def create_observation(self):
        return np.zeros(1, dtype=int)

    def create_transition_distribution(self):
        return SparseCategorical()

    def create_observation_distribution(self):
        return SparseCategorical()

    def __repr__(self) -> str:
        return f"NoisyChain of length {self.length}"


class CountingFilter:
    """Exact belief over the cells of a :class:`NoisyChain`

    The belief is an array of probabilities, updated in place in ``out``
    """

    def __init__(self, model: NoisyChain):
        self.model = model
        self._transition = SparseCategorical()
        self._observation = SparseCategorical()

    def create_belief(self) -> np.ndarray:
        return np.empty(self.model.length)

    def update(self, belief, action, observation, out):
        out.fill(0.0)
        for s, p_s in enumerate(belief):
            if p_s == 0:
                continue
            distr = self.model.transition(np.array([s]), action, self._transition)
            for next_s, p_next in zip(distr.support(), distr.probabilities):
                o_distr = self.model.observation(
                    np.array([s]), action, next_s, self._observation
                )
                try:
                    p_o = o_distr.density(observation)
                except DomainError:
                    continue
                out[next_s[0]] += p_s * p_next * p_o

        total = out.sum()
        if total > 0:
            out /= total
        return out

    def initialize_belief(self, distribution, out=None):
        if out is None:
            out = self.create_belief()
        out.fill(0.0)
        for i in range(self.model.length):
            try:
                out[i] = distribution.density(np.array([i]))
            except DomainError:
                pass
        return out

    def __repr__(self) -> str:
        return "CountingFilter"


@pytest.fixture
def constant_model():
    """factory of :class:`ConstantModel`"""
    return ConstantModel


@pytest.fixture
def chain():
    """a :class:`NoisyChain` of length 5"""
    return NoisyChain()


@pytest.fixture
def chain_filter(chain):  # pylint: disable=redefined-outer-name
    """a :class:`CountingFilter` over ``chain``"""
    return CountingFilter(chain)


@pytest.fixture
def chain_filter_factory(chain):  # pylint: disable=redefined-outer-name
    """creates new :class:`CountingFilter` over ``chain``"""
    return lambda: CountingFilter(chain)
