"""Belief updaters that do not depend on any particular belief representation

Concrete belief representations (particle filters, exact Bayes filters, ...)
are provided by problem or solver packages; these are the trivial updaters
that every model can be simulated with.
"""

from typing import Any

from pomdp_protocols.core import BeliefUpdater, ConversionError, Distribution
from pomdp_protocols.distributions import write_outcome


class NoopUpdater:
    """An updater whose belief never changes

    The belief is whatever :meth:`initialize_belief` was given: the (initial)
    distribution is passed on untouched for the entire run.
    """

    def create_belief(self) -> Any:
        """no representation to pre-allocate"""
        return None

    def update(
        self, belief: Any, action: Any, observation: Any, out: Any  # pylint: disable=unused-argument
    ) -> Any:
        """returns ``belief``"""
        return belief

    def initialize_belief(self, distribution: Any, out: Any = None) -> Any:  # pylint: disable=unused-argument
        """returns ``distribution``, this conversion is lossless"""
        return distribution

    def __repr__(self) -> str:
        return "NoopUpdater"


class PreviousObservationUpdater:
    """An updater whose belief is the most recent observation

    Lossy conversion: :meth:`initialize_belief` discards the distribution
    and starts with ``initial_observation`` (``None`` by default).
    """

    def __init__(self, initial_observation: Any = None):
        self.initial_observation = initial_observation

    def create_belief(self) -> Any:
        """a copy of the initial observation, to be overwritten"""
        return write_outcome(self.initial_observation, None)

    def update(
        self, belief: Any, action: Any, observation: Any, out: Any  # pylint: disable=unused-argument
    ) -> Any:
        """returns ``observation``, written into ``out`` when possible"""
        return write_outcome(observation, out)

    def initialize_belief(self, distribution: Any, out: Any = None) -> Any:
        """ignores ``distribution``, returns the initial observation

        Raises :class:`ConversionError` if ``distribution`` is not a
        :class:`Distribution` over states (nor ``None``)

        """

        if distribution is not None and not isinstance(distribution, Distribution):
            raise ConversionError(f"{distribution} is not a distribution over states")

        return write_outcome(self.initial_observation, out)

    def __repr__(self) -> str:
        return f"PreviousObservationUpdater({self.initial_observation})"


def check_closure(
    updater: BeliefUpdater, belief: Any, action: Any, observation: Any
) -> Any:
    """runs a single update and asserts it does not need a conversion

    Testing aid: an updater must accept every belief it produced itself.

    Args:
         updater: (`BeliefUpdater`):
         belief: (`Any`): a belief produced by ``updater``
         action: (`Any`):
         observation: (`Any`):

    RETURNS (`Any`): the updated belief

    """

    try:
        return updater.update(belief, action, observation, updater.create_belief())
    except ConversionError as error:
        raise AssertionError(
            f"{updater} is not closed under its own beliefs: {error}"
        ) from error
