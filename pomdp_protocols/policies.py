"""Simple policies and solvers

Real solvers (value iteration, MCTS, point-based methods, ...) live in their
own packages and only need to implement :class:`pomdp_protocols.core.Solver`.
"""

from typing import Any, Callable, Optional

import numpy as np

from pomdp_protocols.core import POMDP, ConfigurationError


class FunctionPolicy:
    """A policy that calls a function of the belief"""

    def __init__(self, f: Optional[Callable[[Any], Any]] = None):
        """Wraps ``f``

        Args:
             f: (`Optional[Callable[[Any], Any]]`): belief -> action, set later when solving

        """
        self.f = f

    def action(self, belief: Any) -> Any:
        """returns ``f(belief)``, raises :class:`ConfigurationError` if not solved yet"""

        if self.f is None:
            raise ConfigurationError(f"{self} has not been solved yet")

        return self.f(belief)

    def __repr__(self) -> str:
        return f"FunctionPolicy({getattr(self.f, '__name__', self.f)})"


class ConstantPolicy:
    """Always takes the same action"""

    def __init__(self, action: Any):
        self._action = action

    def action(self, belief: Any) -> Any:  # pylint: disable=unused-argument
        """returns the constant action"""
        return self._action

    def __repr__(self) -> str:
        return f"ConstantPolicy({self._action})"


class RandomPolicy:
    """Picks uniformly from the action space

    This policy is **stochastic**: during simulations it draws from the
    randomness source of the run (see :func:`pomdp_protocols.core.action`),
    so it is never modified and can be shared between (concurrent) runs.
    """

    stochastic = True

    def __init__(self, model: POMDP, rng: Optional[np.random.Generator] = None):
        """Creates a random policy over the actions of ``model``

        Args:
             model: (`POMDP`): provides the action space
             rng: (`Optional[np.random.Generator]`): used only when :meth:`action` is called without one

        """
        self._actions = list(model.actions())
        self._rng = rng if rng is not None else np.random.default_rng()

        assert self._actions, f"{model} has no actions"

    def action(  # pylint: disable=unused-argument
        self, belief: Any, rng: Optional[np.random.Generator] = None
    ) -> Any:
        """returns a random action drawn from ``rng``"""

        if rng is None:
            rng = self._rng

        return self._actions[int(rng.integers(len(self._actions)))]

    def __repr__(self) -> str:
        return f"RandomPolicy over {len(self._actions)} actions"


class FunctionSolver:
    """'Solves' a model by wrapping a given function as a policy"""

    def __init__(self, f: Callable[[Any], Any]):
        self.f = f

    def create_policy(self, model: POMDP) -> FunctionPolicy:  # pylint: disable=unused-argument
        """returns an empty :class:`FunctionPolicy`"""
        return FunctionPolicy()

    def solve(self, model: POMDP, out: FunctionPolicy) -> FunctionPolicy:  # pylint: disable=unused-argument
        """fills ``out`` with the function of ``self``"""
        out.f = self.f
        return out
