"""
Тесты для RandomVariable.

Coverage:
- Свидетельство измеримости и smart-конструкторы
- Прообразы, образ, σ(X)
- Закон (pushforward) и его идемпотентность
- Композиция и совместная величина
- Математическое ожидание и дисперсия, NotIntegrable
"""

import math
from fractions import Fraction

import pytest

from probspace.core.errors import NotIntegrable, NotMeasurable
from probspace.core.measure import Measure
from probspace.core.probability import ProbabilityMeasure
from probspace.core.random_variable import (
    Integrand,
    MeasurabilityWitness,
    RandomVariable,
    certify_measurable,
    finite_sum_integrator,
)
from probspace.core.sigma_algebra import SigmaAlgebra

OMEGA = {1, 2, 3, 4}


@pytest.fixture
def discrete():
    return SigmaAlgebra.discrete(OMEGA)


@pytest.fixture
def coarse():
    return SigmaAlgebra.generated_by(OMEGA, [{1, 2}])


@pytest.fixture
def uniform(discrete):
    return ProbabilityMeasure.uniform(discrete)


class TestConstruction:
    """Свидетельство измеримости и конструирование."""

    def test_construct_measurable(self, coarse):
        target = SigmaAlgebra.discrete({"low", "high"})
        rv = RandomVariable.construct(
            lambda w: "low" if w <= 2 else "high", coarse, target, name="level"
        )
        assert rv(1) == "low"
        assert rv(4) == "high"
        assert rv.source == coarse
        assert rv.target == target

    def test_construct_not_measurable(self, coarse):
        target = SigmaAlgebra.discrete({0, 1})
        with pytest.raises(NotMeasurable, match="not measurable"):
            RandomVariable.construct(lambda w: w % 2, coarse, target)

    def test_try_construct(self, coarse):
        target = SigmaAlgebra.discrete({0, 1})
        result = RandomVariable.try_construct(lambda w: w % 2, coarse, target)
        assert not result.ok
        assert result.reason.startswith("NotMeasurable")

    def test_value_outside_target(self, discrete):
        target = SigmaAlgebra.discrete({0})
        with pytest.raises(NotMeasurable, match="outside the target space"):
            RandomVariable.construct(lambda w: w, discrete, target)

    def test_witness_required(self, discrete):
        with pytest.raises(NotMeasurable, match="witness is required"):
            RandomVariable(lambda w: w, witness=None)

    def test_witness_must_match_function(self, discrete):
        target = SigmaAlgebra.discrete({0, 1})
        witness = certify_measurable(lambda w: w % 2, discrete, target)
        assert isinstance(witness, MeasurabilityWitness)
        with pytest.raises(NotMeasurable, match="does not certify"):
            RandomVariable(lambda w: 1 - w % 2, witness)

    def test_real_requires_constant_on_atoms(self, coarse):
        assert RandomVariable.real(lambda w: 0 if w <= 2 else 1, coarse)(3) == 1
        with pytest.raises(NotMeasurable):
            RandomVariable.real(lambda w: w, coarse)

    def test_indicator(self, coarse):
        indicator = RandomVariable.indicator(coarse, {3, 4})
        assert [indicator(w) for w in (1, 2, 3, 4)] == [0, 0, 1, 1]
        with pytest.raises(NotMeasurable):
            RandomVariable.indicator(coarse, {3})

    def test_constant_is_always_measurable(self):
        trivial = SigmaAlgebra.trivial(OMEGA)
        assert RandomVariable.constant(trivial, 7).image() == frozenset({7})

    def test_identity(self, discrete):
        identity = RandomVariable.identity(discrete)
        assert identity(3) == 3
        assert identity.target == discrete

    def test_unknown_outcome(self, discrete):
        rv = RandomVariable.identity(discrete)
        with pytest.raises(KeyError):
            rv(99)


class TestStructure:
    """Прообразы и порождённая sigma-алгебра."""

    def test_preimage_and_image(self, discrete):
        rv = RandomVariable.real(lambda w: w % 2, discrete)
        assert rv.preimage({1}) == frozenset({1, 3})
        assert rv.image() == frozenset({0, 1})

    def test_generated_sigma_algebra(self, discrete, coarse):
        rv = RandomVariable.real(lambda w: 0 if w <= 2 else 1, discrete)
        assert rv.generated_sigma_algebra() == coarse
        assert rv.is_measurable_wrt(coarse)
        assert not rv.is_measurable_wrt(SigmaAlgebra.trivial(OMEGA))

    def test_measurability_wrt_other_space(self, discrete):
        rv = RandomVariable.identity(discrete)
        assert not rv.is_measurable_wrt(SigmaAlgebra.discrete({1, 2}))


class TestLaw:
    """Закон случайной величины."""

    def test_law_values(self, discrete, uniform):
        rv = RandomVariable.real({1: "x", 2: "x", 3: "x", 4: "y"}, discrete)
        law = rv.law(uniform)
        assert law.apply({"x"}) == Fraction(3, 4)
        assert law.apply({"y"}) == Fraction(1, 4)

    def test_law_idempotence(self, discrete, uniform):
        """Дважды вычисленный закон — разные объекты, равные по значению."""
        rv = RandomVariable.real(lambda w: w % 2, discrete)
        first = rv.law(uniform)
        second = rv.law(uniform)
        assert first is not second
        assert first == second

    def test_law_of_identical_variables(self, discrete, uniform):
        x = RandomVariable.real(lambda w: w % 2, discrete)
        y = RandomVariable.real({1: 1, 2: 0, 3: 1, 4: 0}, discrete)
        assert x == y
        assert hash(x) == hash(y)
        assert x.law(uniform) == y.law(uniform)


class TestComposition:
    """g ∘ X и (X, Y)."""

    def test_compose(self, discrete):
        rv = RandomVariable.identity(discrete)
        target = SigmaAlgebra.discrete({0, 1})
        parity = rv.compose(lambda v: v % 2, target)
        assert parity(3) == 1

    def test_compose_on_coarse_source(self, coarse):
        rv = RandomVariable.real(lambda w: 0 if w <= 2 else 1, coarse)
        target = SigmaAlgebra.discrete({"a", "b"})
        assert rv.compose(lambda v: "a" if v else "b", target)(1) == "b"

    def test_compose_value_outside_target(self, discrete):
        rv = RandomVariable.identity(discrete)
        with pytest.raises(NotMeasurable):
            rv.compose(lambda v: v * 10, SigmaAlgebra.discrete({0, 1}))

    def test_pair(self, discrete, uniform):
        x = RandomVariable.real(lambda w: w % 2, discrete)
        y = RandomVariable.real(lambda w: 0 if w <= 2 else 1, discrete)
        joint = x.pair(y)
        assert joint(3) == (1, 1)
        assert joint.law(uniform).apply({(1, 1)}) == Fraction(1, 4)

    def test_pair_requires_same_source(self, discrete, coarse):
        x = RandomVariable.identity(discrete)
        y = RandomVariable.constant(coarse, 0)
        with pytest.raises(ValueError, match="share the source"):
            x.pair(y)


class TestExpectation:
    """Математическое ожидание."""

    def test_expectation_exact(self, discrete, uniform):
        rv = RandomVariable.identity(discrete)
        assert rv.expectation(uniform) == Fraction(5, 2)

    def test_expectation_of_indicator_is_probability(self, discrete, uniform):
        indicator = RandomVariable.indicator(discrete, {1, 2, 3})
        assert indicator.expectation(uniform) == uniform.apply({1, 2, 3})

    def test_expectation_counting(self, discrete):
        rv = RandomVariable.identity(discrete)
        assert rv.expectation(Measure.counting(discrete)) == 10

    def test_variance(self, discrete, uniform):
        rv = RandomVariable.identity(discrete)
        assert rv.variance(uniform) == Fraction(5, 4)

    def test_infinite_value_on_positive_mass(self, discrete, uniform):
        rv = RandomVariable.real({1: 0, 2: 0, 3: 0, 4: math.inf}, discrete)
        with pytest.raises(NotIntegrable):
            rv.expectation(uniform)

    def test_infinite_value_on_null_set(self, discrete):
        measure = Measure.dirac(discrete, 1)
        rv = RandomVariable.real({1: 2, 2: 0, 3: 0, 4: math.inf}, discrete)
        assert rv.expectation(measure) == 2

    def test_nonzero_value_on_infinite_mass(self, discrete):
        measure = Measure.from_point_masses(discrete, {1: math.inf})
        with pytest.raises(NotIntegrable, match="infinite measure"):
            RandomVariable.identity(discrete).expectation(measure)

    def test_non_numeric_values(self, discrete, uniform):
        rv = RandomVariable.real(lambda w: str(w), discrete)
        with pytest.raises(NotIntegrable, match="not a real number"):
            rv.expectation(uniform)

    def test_custom_integrator(self, discrete, uniform):
        """Backend интегрирования получает Integrand."""
        seen = []

        def integrator(integrand: Integrand):
            seen.append(integrand)
            return finite_sum_integrator(integrand)

        rv = RandomVariable.identity(discrete)
        assert rv.expectation(uniform, integrator) == Fraction(5, 2)
        assert seen[0].random_variable is rv
        assert seen[0].measure is uniform

    def test_expectation_requires_measurability(self, discrete, coarse):
        measure = ProbabilityMeasure.uniform(coarse)
        with pytest.raises(NotMeasurable):
            RandomVariable.identity(discrete).expectation(measure)

    def test_expectation_on_other_sample_space(self, uniform):
        """Величина на Ω' = {1, 2} не интегрируется по мере на Ω = {1, 2, 3, 4}."""
        rv = RandomVariable.real(lambda w: 1, SigmaAlgebra.discrete({1, 2}))
        with pytest.raises(NotMeasurable):
            rv.expectation(uniform)
        with pytest.raises(NotMeasurable):
            rv.law(uniform)

    def test_describe(self, discrete):
        rv = RandomVariable.real(lambda w: w % 2, discrete, name="parity")
        description = rv.describe()
        assert description.identifier == "parity"
        assert description.image == ["0", "1"]
