"""The object-reuse (pre-allocation) protocol

A driver allocates every scratch object once per simulation run through the
``create_*`` functions below, and then only ever passes them into operations
that overwrite them. Content of a freshly created object is unspecified and
must not be read before it is filled.

Scratch objects are owned by exactly one run: they must never be shared
between runs that execute concurrently.
"""

from copy import deepcopy
from typing import Any, NamedTuple

import numpy as np

from pomdp_protocols.core import BeliefUpdater, Distribution, POMDP, Policy, Solver


def create_state(model: POMDP) -> Any:
    """returns a scratch state of ``model``"""
    return model.create_state()


def create_action(model: POMDP) -> Any:
    """returns a scratch action of ``model``"""
    return model.create_action()


def create_observation(model: POMDP) -> Any:
    """returns a scratch observation of ``model``"""
    return model.create_observation()


def create_belief(updater: BeliefUpdater) -> Any:
    """returns a scratch belief in the representation of ``updater``"""
    return updater.create_belief()


def create_policy(solver: Solver, model: POMDP) -> Policy:
    """returns a scratch policy for ``solver`` to fill when solving ``model``"""
    return solver.create_policy(model)


def create_transition_distribution(model: POMDP) -> Distribution:
    """returns a scratch distribution for :meth:`POMDP.transition`"""
    return model.create_transition_distribution()


def create_observation_distribution(model: POMDP) -> Distribution:
    """returns a scratch distribution for :meth:`POMDP.observation`"""
    return model.create_observation_distribution()


class Scratch(NamedTuple):
    """All the scratch objects a single simulation run owns

    States and beliefs are double buffered: the loop needs both the state
    before and after a transition (to sample the observation), and updaters
    read the old belief while writing the new one.
    """

    state: Any
    next_state: Any
    action: Any
    observation: Any
    belief: Any
    next_belief: Any
    transition_distribution: Distribution
    observation_distribution: Distribution


def allocate_scratch(model: POMDP, updater: BeliefUpdater) -> Scratch:
    """allocates all scratch objects needed to simulate ``model``

    Args:
         model: (`POMDP`):
         updater: (`BeliefUpdater`):

    RETURNS (`Scratch`):

    """
    return Scratch(
        state=create_state(model),
        next_state=create_state(model),
        action=create_action(model),
        observation=create_observation(model),
        belief=create_belief(updater),
        next_belief=create_belief(updater),
        transition_distribution=create_transition_distribution(model),
        observation_distribution=create_observation_distribution(model),
    )


def detach(obj: Any) -> Any:
    """returns a copy of ``obj`` that is not coupled to any scratch object

    Used to record values of scratch objects that are overwritten later

    """

    if isinstance(obj, np.ndarray):
        return obj.copy()

    return deepcopy(obj)
