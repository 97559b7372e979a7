"""Core functionality and models

Contains the protocols for problem models (POMDPs), distributions, beliefs
and their updaters, policies and solvers. Any concrete problem provides one
implementation of each, and everything else in this package (most notably
the simulation loop) talks to them only through the functions defined here.

Scratch objects are the central convention: wherever an operation produces a
state, observation, distribution, belief or policy, the caller passes in a
pre-allocated instance (``out``) which the callee overwrites and returns.
The *returned* value is authoritative, as immutable outcomes (e.g. ``int``
actions) cannot be filled in place.

"""

from enum import Enum
from typing import Any, Iterable, Optional

import numpy as np
from typing_extensions import Protocol, runtime_checkable


class DomainError(ValueError):
    """raised when an operation is evaluated outside its domain

    E.g. the density of an outcome that is not in the support of a
    distribution, or an action that is not legal in some state.
    """


class ConversionError(TypeError):
    """raised when a belief cannot be represented by an updater"""


class ConfigurationError(ValueError):
    """raised when a simulation is set up with invalid configurations"""


class RewardForm(Enum):
    """Which arity of the reward function a model implements

    EXPECTED: ``reward(s, a)``, the expectation over the transition
    REALIZED: ``reward(s, a, s')``, reward of one sampled transition
    """

    EXPECTED = 2
    REALIZED = 3


@runtime_checkable
class Distribution(Protocol):
    """A sampler and density evaluator over some domain"""

    def sample(self, rng: np.random.Generator, out: Any = None) -> Any:
        """samples an outcome, written into ``out`` when possible

        Args:
             rng: (`np.random.Generator`): the (threaded) source of randomness
             out: (`Any`): scratch instance of the domain type

        RETURNS (`Any`): the sample, aliases ``out`` if it was filled in place

        """

    def density(self, outcome: Any) -> float:
        """returns the probability (density) of ``outcome``

        May raise :class:`DomainError` if ``outcome`` is outside the support

        Args:
             outcome: (`Any`):

        RETURNS (`float`):

        """


@runtime_checkable
class POMDP(Protocol):
    """The protocol for a problem model

    A model is immutable shared input: none of these operations change the
    model itself. Those that produce distributions fill the scratch
    distribution handed to them.
    """

    def states(self) -> Iterable[Any]:
        """the state space"""

    def actions(self, state: Any = None, out: Any = None) -> Iterable[Any]:
        """the action space, or legal actions in ``state`` if given

        Args:
             state: (`Any`): optional state to restrict the space to
             out: (`Any`): optional scratch space to write the legal actions into

        RETURNS (`Iterable[Any]`): (aliases ``out`` when it was filled)

        """

    def observations(self, state: Any = None, out: Any = None) -> Iterable[Any]:
        """the observation space, or the observations possible in ``state``"""

    def reward(self, state: Any, action: Any, next_state: Any = None) -> float:
        """the immediate reward, see :class:`RewardForm` for which arity is used"""

    def transition(self, state: Any, action: Any, out: Distribution) -> Distribution:
        """fills ``out`` with the distribution over next states

        Args:
             state: (`Any`): state at timestep t
             action: (`Any`): action at timestep t
             out: (`Distribution`): scratch distribution

        RETURNS (`Distribution`): over states at t+1, aliases ``out``

        """

    def observation(
        self, state: Any, action: Any, next_state: Any, out: Distribution
    ) -> Distribution:
        """fills ``out`` with the distribution over observations of (s, a, s')"""

    def discount(self) -> float:
        """the discount factor, fixed for the lifetime of the model"""

    def is_terminal(self, state: Any) -> bool:
        """whether no more transitions may be applied from ``state``"""

    def initial_state_distribution(self) -> Distribution:
        """the distribution over start states (default initial belief)"""

    def create_state(self) -> Any:
        """returns a scratch state, content is unspecified until filled"""

    def create_action(self) -> Any:
        """returns a scratch action, content is unspecified until filled"""

    def create_observation(self) -> Any:
        """returns a scratch observation, content is unspecified until filled"""

    def create_transition_distribution(self) -> Distribution:
        """returns a scratch distribution to pass to :meth:`transition`"""

    def create_observation_distribution(self) -> Distribution:
        """returns a scratch distribution to pass to :meth:`observation`"""


@runtime_checkable
class BeliefUpdater(Protocol):
    """Defines the protocol of belief update rules

    :meth:`update` is a pure function of its arguments: no hidden context
    other than the model the updater was constructed with.
    """

    def create_belief(self) -> Any:
        """returns a scratch belief in the native representation of ``self``"""

    def update(self, belief: Any, action: Any, observation: Any, out: Any) -> Any:
        """folds (``action``, ``observation``) into ``belief``

        Must be total over any belief produced by ``self``.

        Args:
             belief: (`Any`): belief at timestep t
             action: (`Any`): action at timestep t
             observation: (`Any`): observation at timestep t+1
             out: (`Any`): scratch belief that is overwritten

        RETURNS (`Any`): belief at timestep t+1 (aliases ``out`` if filled)

        """

    def initialize_belief(self, distribution: Any, out: Any = None) -> Any:
        """converts ``distribution`` into the native representation of ``self``

        May be lossy, but raises :class:`ConversionError` rather than return an
        invalid belief
        """


@runtime_checkable
class Policy(Protocol):
    """A decision rule from beliefs to actions

    Policies that set ``stochastic = True`` implement ``action(belief, rng)``
    instead, see :func:`action`.
    """

    def action(self, belief: Any) -> Any:
        """returns the action to take given ``belief``"""


@runtime_checkable
class Solver(Protocol):
    """A policy-producing algorithm"""

    def create_policy(self, model: POMDP) -> Policy:
        """returns a scratch policy to pass to :meth:`solve`"""

    def solve(self, model: POMDP, out: Policy) -> Policy:
        """computes a policy for ``model`` into ``out``, never modifying ``model``"""


def sample(rng: np.random.Generator, scratch: Any, distribution: Distribution) -> Any:
    """samples from ``distribution`` into ``scratch``

    Args:
         rng: (`np.random.Generator`):
         scratch: (`Any`): instance of the domain type to fill
         distribution: (`Distribution`):

    RETURNS (`Any`): the sample (aliases ``scratch`` when filled in place)

    """
    return distribution.sample(rng, scratch)


def density(distribution: Distribution, outcome: Any) -> float:
    """returns the probability (density) of ``outcome`` in ``distribution``"""
    return distribution.density(outcome)


def reward_form(model: POMDP) -> RewardForm:
    """returns which reward arity ``model`` implements (default `EXPECTED`)"""
    return getattr(model, "reward_form", RewardForm.EXPECTED)


def reward(model: POMDP, state: Any, action: Any, next_state: Any = None) -> float:
    """calls the reward function of ``model`` with the arity it declared

    Raises :class:`DomainError` when a realized reward is requested without
    ``next_state``

    Args:
         model: (`POMDP`):
         state: (`Any`):
         action: (`Any`):
         next_state: (`Any`): required when the model is `RewardForm.REALIZED`

    RETURNS (`float`):

    """

    if reward_form(model) == RewardForm.REALIZED:
        if next_state is None:
            raise DomainError(f"the realized reward of {model} requires the next state")
        return float(model.reward(state, action, next_state))

    return float(model.reward(state, action))


def discount(model: POMDP) -> float:
    """returns the discount factor of ``model``

    Raises :class:`ConfigurationError` if it is not in (0, 1]

    """

    gamma = float(model.discount())

    if not 0 < gamma <= 1:
        raise ConfigurationError(f"discount factor must be in (0, 1], not {gamma}")

    return gamma


def is_terminal(model: POMDP, state: Any) -> bool:
    """returns whether ``state`` is terminal in ``model``"""
    return bool(model.is_terminal(state))


def update(
    updater: BeliefUpdater, belief: Any, action: Any, observation: Any, scratch: Any
) -> Any:
    """updates ``belief`` into ``scratch``, see :meth:`BeliefUpdater.update`"""
    return updater.update(belief, action, observation, scratch)


def convert_belief(updater: BeliefUpdater, belief: Any, scratch: Any = None) -> Any:
    """converts a (possibly foreign) ``belief`` for ``updater``

    Raises :class:`ConversionError` when the representations are incompatible

    """
    return updater.initialize_belief(belief, scratch)


def solve(solver: Solver, model: POMDP, scratch: Optional[Policy] = None) -> Policy:
    """runs ``solver`` on ``model``, filling ``scratch`` (created if not given)"""

    if scratch is None:
        scratch = solver.create_policy(model)

    return solver.solve(model, scratch)


def action(
    policy: Policy, belief: Any, rng: Optional[np.random.Generator] = None
) -> Any:
    """returns the action ``policy`` takes in ``belief``

    Stochastic policies (those with a true ``stochastic`` attribute) are
    handed ``rng``, so that they draw from the source of the run rather than
    from one of their own.

    Args:
         policy: (`Policy`):
         belief: (`Any`):
         rng: (`Optional[np.random.Generator]`): the (threaded) source of randomness

    RETURNS (`Any`):

    """

    if rng is not None and getattr(policy, "stochastic", False):
        return policy.action(belief, rng)  # type: ignore

    return policy.action(belief)


def value(policy: Policy, belief: Any) -> float:
    """returns the estimated utility of ``belief`` under ``policy``

    Optional capability, used for diagnostics only. Raises
    `NotImplementedError` if ``policy`` does not provide it.

    """

    value_f = getattr(policy, "value", None)

    if value_f is None:
        raise NotImplementedError(f"{policy} does not implement `value`")

    return float(value_f(belief))
