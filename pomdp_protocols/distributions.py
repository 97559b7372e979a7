"""Reference implementations of :class:`pomdp_protocols.core.Distribution`

Contains:
    * :class:`SparseCategorical`: enumerated support with weights
    * :class:`Uniform`: equal weights over an enumerated support
    * :class:`Deterministic`: point mass

All of them can be (re)filled in place, so that models can use them as the
scratch distributions handed to ``transition`` and ``observation``.
"""

from typing import Any, Dict, Hashable, List, Optional, Sequence

import numpy as np

from pomdp_protocols.core import DomainError


def outcome_key(outcome: Any) -> Hashable:
    """returns a hashable key of ``outcome``, arrays are keyed by their content"""

    if isinstance(outcome, np.ndarray):
        return tuple(outcome.ravel().tolist())

    return outcome


def write_outcome(value: Any, out: Any) -> Any:
    """writes ``value`` into ``out`` if possible, returns the result

    Arrays of matching shape are copied into ``out``; anything else (immutable
    outcomes, no scratch given) is returned directly. Arrays are never handed
    out by reference, so that callers cannot mutate a support.

    Args:
         value: (`Any`): the outcome
         out: (`Any`): scratch instance

    RETURNS (`Any`): ``out`` if filled, otherwise (a copy of) ``value``

    """

    if isinstance(value, np.ndarray):
        if isinstance(out, np.ndarray) and out.shape == value.shape:
            np.copyto(out, value, casting="unsafe")
            return out
        return value.copy()

    return value


class SparseCategorical:
    """A categorical distribution over an explicitly enumerated support"""

    def __init__(self, support: Sequence[Any] = (), probabilities: Sequence[float] = ()):
        """Creates a categorical over ``support``

        An empty distribution (no arguments) is a valid scratch object, to be
        filled through :meth:`fill` before use.

        Args:
             support: (`Sequence[Any]`): outcomes
             probabilities: (`Sequence[float]`): probability of each outcome

        """

        self._support: List[Any] = []
        self._probs = np.zeros(0)
        self._cdf = np.zeros(0)
        self._masses: Optional[Dict[Hashable, float]] = None

        if len(support) or len(probabilities):
            self.fill(support, probabilities)

    def fill(
        self, support: Sequence[Any], probabilities: Sequence[float]
    ) -> "SparseCategorical":
        """overwrites ``self`` with a new support and probabilities

        Re-uses the internal buffers when the size of the support is unchanged.
        Raises :class:`DomainError`, leaving ``self`` untouched, if the input
        is not a probability distribution

        Args:
             support: (`Sequence[Any]`):
             probabilities: (`Sequence[float]`):

        RETURNS (`SparseCategorical`): ``self``

        """

        probs = np.asarray(probabilities, dtype=float)

        if len(support) != len(probs):
            raise DomainError(
                f"support of size {len(support)} does not match "
                f"{len(probs)} probabilities"
            )
        if len(support) == 0:
            raise DomainError("a categorical distribution requires a non-empty support")
        if (probs < 0).any() or not np.isclose(probs.sum(), 1.0):
            raise DomainError(f"{probs} is not a probability distribution")

        if len(self._support) == len(support):
            self._support[:] = support
            self._probs[:] = probs
        else:
            self._support = list(support)
            self._probs = probs.copy()
            self._cdf = np.empty_like(self._probs)

        np.cumsum(self._probs, out=self._cdf)
        self._masses = None

        return self

    def sample(self, rng: np.random.Generator, out: Any = None) -> Any:
        """samples an outcome into ``out``

        Args:
             rng: (`np.random.Generator`):
             out: (`Any`): scratch outcome

        RETURNS (`Any`): the sample

        """

        if not self._support:
            raise DomainError(f"{self} has not been filled yet")

        idx = int(np.searchsorted(self._cdf, rng.random() * self._cdf[-1], side="right"))
        return write_outcome(self._support[min(idx, len(self._support) - 1)], out)

    def density(self, outcome: Any) -> float:
        """returns the probability of ``outcome``

        Duplicate elements in the support add up. Raises :class:`DomainError`
        if ``outcome`` is not in the support

        """

        if self._masses is None:
            self._masses = {}
            for o, p in zip(self._support, self._probs):
                key = outcome_key(o)
                self._masses[key] = self._masses.get(key, 0.0) + float(p)

        try:
            return self._masses[outcome_key(outcome)]
        except KeyError as error:
            raise DomainError(f"{outcome} is not in the support of {self}") from error

    def support(self) -> List[Any]:
        """returns the outcomes of ``self``"""
        return self._support

    @property
    def probabilities(self) -> np.ndarray:
        """the probability of each element in :meth:`support`"""
        return self._probs

    def __len__(self) -> int:
        return len(self._support)

    def __repr__(self) -> str:
        return f"SparseCategorical({self._support}, {self._probs.tolist()})"


class Uniform(SparseCategorical):
    """Equal probability on each element of an enumerated support"""

    def __init__(self, support: Sequence[Any] = ()):
        super().__init__()

        if len(support):
            self.fill(support)

    def fill(  # pylint: disable=arguments-differ
        self, support: Sequence[Any], probabilities: Optional[Sequence[float]] = None
    ) -> "Uniform":
        """overwrites ``self`` to be uniform over ``support``"""
        assert probabilities is None, "uniform distributions have no probabilities"

        super().fill(support, np.full(len(support), 1.0 / max(len(support), 1)))
        return self

    def __repr__(self) -> str:
        return f"Uniform({self._support})"


class Deterministic:
    """A point mass on a single outcome"""

    def __init__(self, value: Any = None):
        self.value = value

    def fill(self, value: Any) -> "Deterministic":
        """overwrites ``self`` with ``value``, returns ``self``"""
        self.value = value
        return self

    def sample(
        self, rng: np.random.Generator, out: Any = None  # pylint: disable=unused-argument
    ) -> Any:
        """returns the point mass, written into ``out`` when possible"""
        return write_outcome(self.value, out)

    def density(self, outcome: Any) -> float:
        """1 for the point mass, raises :class:`DomainError` for anything else"""

        if outcome_key(outcome) != outcome_key(self.value):
            raise DomainError(f"{outcome} is not in the support of {self}")

        return 1.0

    def support(self) -> List[Any]:
        """returns ``[value]``"""
        return [self.value]

    def __repr__(self) -> str:
        return f"Deterministic({self.value})"
