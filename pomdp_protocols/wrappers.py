"""Convenience layer for callers that do not manage scratch objects

Every function here creates a fresh scratch object when none is given, and
then calls the allocation-free operation in :mod:`pomdp_protocols.core`.
Drivers that care about allocations (e.g. the simulators) should not use
these.
"""

from typing import Any, List, Optional

import numpy as np

from pomdp_protocols import core, preallocation


def transition(
    model: core.POMDP, state: Any, action: Any, out: Optional[core.Distribution] = None
) -> core.Distribution:
    """returns the distribution over next states of (``state``, ``action``)"""

    if out is None:
        out = preallocation.create_transition_distribution(model)

    return model.transition(state, action, out)


def observation(
    model: core.POMDP,
    state: Any,
    action: Any,
    next_state: Any,
    out: Optional[core.Distribution] = None,
) -> core.Distribution:
    """returns the distribution over observations of (``state``, ``action``, ``next_state``)"""

    if out is None:
        out = preallocation.create_observation_distribution(model)

    return model.observation(state, action, next_state, out)


def sample_next_state(
    rng: np.random.Generator, model: core.POMDP, state: Any, action: Any
) -> Any:
    """samples a next state in a newly allocated state"""
    return core.sample(
        rng, preallocation.create_state(model), transition(model, state, action)
    )


def sample_observation(
    rng: np.random.Generator,
    model: core.POMDP,
    state: Any,
    action: Any,
    next_state: Any,
) -> Any:
    """samples an observation in a newly allocated observation"""
    return core.sample(
        rng,
        preallocation.create_observation(model),
        observation(model, state, action, next_state),
    )


def legal_actions(model: core.POMDP, state: Any) -> List[Any]:
    """returns the actions legal in ``state`` as a list"""
    return list(model.actions(state))


def check_legal_action(model: core.POMDP, state: Any, action: Any) -> Any:
    """returns ``action`` if legal in ``state``, raises :class:`core.DomainError` otherwise"""

    for legal in model.actions(state):
        if np.array_equal(legal, action):
            return action

    raise core.DomainError(f"action {action} is not legal in state {state}")


def update_belief(
    updater: core.BeliefUpdater, belief: Any, action: Any, observation: Any
) -> Any:
    """returns the updated ``belief`` in a newly allocated belief"""
    return core.update(
        updater, belief, action, observation, preallocation.create_belief(updater)
    )
