"""Tests :mod:`pomdp_protocols.distributions`"""

import numpy as np
import pytest

from pomdp_protocols.core import DomainError
from pomdp_protocols.distributions import (
    Deterministic,
    SparseCategorical,
    Uniform,
    write_outcome,
)


def test_categorical_density():
    """Tests density of outcomes in and outside the support"""

    distr = SparseCategorical(["a", "b", "c"], [0.2, 0.8, 0.0])

    assert distr.density("a") == pytest.approx(0.2)
    assert distr.density("b") == pytest.approx(0.8)
    assert distr.density("c") == 0.0

    with pytest.raises(DomainError):
        distr.density("d")


def test_categorical_duplicates_add_up():
    """Tests duplicate elements in the support accumulate probability"""

    distr = SparseCategorical([np.array([0]), np.array([0]), np.array([1])], [0.8, 0.1, 0.1])

    assert distr.density(np.array([0])) == pytest.approx(0.9)
    assert distr.density(np.array([1])) == pytest.approx(0.1)


def test_categorical_sample_consistent_with_density():
    """Tests samples are only outcomes with positive density"""

    rng = np.random.default_rng(0)
    distr = SparseCategorical([0, 1, 2], [0.5, 0.0, 0.5])

    samples = [distr.sample(rng) for _ in range(200)]

    assert set(samples) == {0, 2}
    for sample in samples:
        assert distr.density(sample) > 0


def test_categorical_sample_into_scratch():
    """Tests array outcomes are written into the scratch"""

    rng = np.random.default_rng(1)
    support = [np.array([1, 1]), np.array([2, 2])]
    distr = SparseCategorical(support, [0.5, 0.5])
    out = np.zeros(2, dtype=int)

    for _ in range(10):
        sample = distr.sample(rng, out)
        assert sample is out
        assert out.tolist() in [[1, 1], [2, 2]]

    # the support itself is never handed out
    sample = distr.sample(rng)
    sample[0] = 100
    assert [s.tolist() for s in distr.support()] == [[1, 1], [2, 2]]


@pytest.mark.parametrize(
    "support,probs",
    [([0, 1], [0.5]), ([0, 1], [0.7, 0.7]), ([0, 1], [1.2, -0.2])],
)
def test_categorical_invalid(support, probs):
    """Tests invalid distributions raise :class:`DomainError`"""

    with pytest.raises(DomainError):
        SparseCategorical(support, probs)


def test_categorical_refill_reuses_buffers():
    """Tests :meth:`SparseCategorical.fill` works in place"""

    distr = SparseCategorical([0, 1], [0.5, 0.5])
    probs = distr.probabilities

    assert distr.fill([2, 3], [0.1, 0.9]) is distr
    assert distr.probabilities is probs
    assert distr.support() == [2, 3]
    assert distr.density(3) == pytest.approx(0.9)

    with pytest.raises(DomainError):
        distr.density(0)

    distr.fill([4, 5, 6], [0.2, 0.2, 0.6])
    assert len(distr) == 3
    assert distr.density(6) == pytest.approx(0.6)


@pytest.mark.parametrize(
    "support,probs",
    [([5, 6], [0.7, 0.7]), ([5, 6, 7], [0.5, 0.6, -0.1]), ([5], [0.5, 0.5])],
)
def test_categorical_failed_fill_leaves_distribution(support, probs):
    """Tests a failed :meth:`SparseCategorical.fill` does not change the distribution"""

    rng = np.random.default_rng(0)
    distr = SparseCategorical([0, 1], [0.25, 0.75])
    distr.density(0)  # caches the masses

    with pytest.raises(DomainError):
        distr.fill(support, probs)

    assert distr.support() == [0, 1]
    np.testing.assert_array_equal(distr.probabilities, [0.25, 0.75])
    assert distr.density(1) == pytest.approx(0.75)
    assert {distr.sample(rng) for _ in range(50)} == {0, 1}

    with pytest.raises(DomainError):
        distr.density(5)


def test_categorical_unfilled():
    """Tests sampling an unfilled distribution raises :class:`DomainError`"""

    with pytest.raises(DomainError):
        SparseCategorical().sample(np.random.default_rng(0))


def test_categorical_sampling_frequencies():
    """Tests empirical frequencies approximate the probabilities"""

    rng = np.random.default_rng(2)
    distr = SparseCategorical([0, 1], [0.25, 0.75])

    frequency = np.mean([distr.sample(rng) for _ in range(4000)])
    assert frequency == pytest.approx(0.75, abs=0.05)


def test_uniform():
    """Tests uniform distributions"""

    distr = Uniform(["x", "y", "z", "w"])

    for outcome in "xyzw":
        assert distr.density(outcome) == pytest.approx(0.25)

    with pytest.raises(AssertionError):
        distr.fill(["x"], [1.0])
    with pytest.raises(DomainError):
        Uniform().fill([])


def test_deterministic():
    """Tests point masses"""

    rng = np.random.default_rng(0)
    distr = Deterministic(3)

    assert distr.sample(rng) == 3
    assert distr.density(3) == 1.0
    assert distr.support() == [3]

    with pytest.raises(DomainError):
        distr.density(4)

    assert distr.fill(5) is distr
    assert distr.sample(rng, 0) == 5


def test_write_outcome():
    """Tests writing outcomes into scratch objects"""

    out = np.zeros(3)
    value = np.array([1.0, 2.0, 3.0])

    assert write_outcome(value, out) is out
    np.testing.assert_array_equal(out, value)

    # shapes that do not match result in a copy
    copy = write_outcome(value, np.zeros(2))
    assert copy is not value
    np.testing.assert_array_equal(copy, value)

    assert write_outcome(4, 0) == 4


if __name__ == "__main__":
    pytest.main([__file__])
