"""
Тесты для ProbabilityMeasure.

Coverage:
- wrap / try_wrap: нормировка μ(Ω) = 1 (точная для рациональных, с толерантностью для float)
- 0 ≤ P(A) ≤ 1 и P(Aᶜ) = 1 - P(A)
- Постусловие apply: округление float к 1.0 в пределах толерантности
- Условная мера cond
- Pushforward вероятностной меры
"""

import math
from fractions import Fraction

import pytest

from probspace.core.config import ToleranceConfig
from probspace.core.errors import NotMeasurable, NotTotalToOne
from probspace.core.measure import Measure
from probspace.core.probability import ProbabilityMeasure, cond, is_probability_measure
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra

OMEGA = {1, 2, 3, 4, 5, 6}


@pytest.fixture
def die():
    return SigmaAlgebra.discrete(OMEGA)


@pytest.fixture
def fair(die):
    return ProbabilityMeasure.uniform(die)


class TestWrap:
    """Нормировка при оборачивании."""

    def test_total_mass_one_succeeds(self, die):
        measure = Measure.from_point_masses(die, {w: Fraction(1, 6) for w in OMEGA})
        probability = ProbabilityMeasure.wrap(measure)
        assert isinstance(probability, ProbabilityMeasure)
        assert isinstance(probability, Measure)
        assert probability.apply(OMEGA) == 1

    def test_total_mass_almost_one_fails(self):
        """Полная масса 0.999999 не является вероятностной мерой."""
        sigma = SigmaAlgebra.discrete({"h", "t"})
        measure = Measure.from_point_masses(sigma, {"h": 0.5, "t": 0.499999})
        with pytest.raises(NotTotalToOne, match="expected 1"):
            ProbabilityMeasure.wrap(measure)

    def test_exact_total_mass_one_float(self):
        sigma = SigmaAlgebra.discrete({"h", "t"})
        measure = Measure.from_point_masses(sigma, {"h": 0.5, "t": 0.5})
        assert ProbabilityMeasure.wrap(measure).total_mass() == 1.0

    def test_rational_almost_one_fails(self, die):
        measure = Measure.from_point_masses(die, {1: Fraction(999999, 1000000)})
        assert not ProbabilityMeasure.try_wrap(measure).ok

    def test_infinite_mass_fails(self, die):
        measure = Measure.from_point_masses(die, {1: math.inf})
        result = ProbabilityMeasure.try_wrap(measure)
        assert not result.ok
        assert isinstance(result.error, NotTotalToOne)
        assert "inf" in result.reason

    def test_counting_measure_is_not_probability(self, die):
        assert not is_probability_measure(Measure.counting(die))
        assert is_probability_measure(Measure.dirac(die, 3))

    def test_wrap_rejects_non_measure(self):
        with pytest.raises(TypeError):
            ProbabilityMeasure.wrap({1: 1})

    def test_custom_tolerance(self):
        sigma = SigmaAlgebra.discrete({"h", "t"})
        measure = Measure.from_point_masses(sigma, {"h": 0.5, "t": 0.499999})
        loose = ToleranceConfig(rel_tol=1e-3)
        assert ProbabilityMeasure.try_wrap(measure, loose).ok

    def test_uniform_on_empty_space_fails(self):
        with pytest.raises(NotTotalToOne):
            ProbabilityMeasure.uniform(SigmaAlgebra.discrete(set()))

    def test_uniform_on_coarse_algebra(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{1, 2}])
        uniform = ProbabilityMeasure.uniform(sigma)
        assert uniform.apply({1, 2}) == Fraction(1, 3)

    def test_named_constructors_return_probability(self, die):
        delta = ProbabilityMeasure.dirac(die, 6)
        assert isinstance(delta, ProbabilityMeasure)
        with pytest.raises(NotTotalToOne):
            ProbabilityMeasure.counting(die)


class TestProbabilityBounds:
    """0 ≤ P(A) ≤ 1 и правило дополнения."""

    def test_bounds_on_every_event(self, fair, die):
        for event in die.measurable_sets():
            assert 0 <= fair.apply(event) <= 1

    def test_complement_rule(self, fair, die):
        for event in die.measurable_sets():
            complement = die.complement(event)
            assert fair.apply(complement) == 1 - fair.apply(event)
            assert fair.prob_compl(event) == fair.apply(complement)

    def test_float_excess_snaps_to_one(self):
        """Накопленная ошибка округления выше 1 возвращается как 1.0."""
        sigma = SigmaAlgebra.discrete(range(10))
        measure = Measure.from_point_masses(sigma, {w: 0.1 for w in range(10)})
        probability = ProbabilityMeasure.wrap(measure)
        value = probability.apply(range(10))
        assert value <= 1
        assert value == pytest.approx(1.0)

    def test_non_measurable_event(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{1, 2, 3}])
        probability = ProbabilityMeasure.uniform(sigma)
        with pytest.raises(NotMeasurable):
            probability.apply({1})


class TestConditioning:
    """Условная мера μ(· | S)."""

    def test_cond(self, fair):
        even = fair.cond({2, 4, 6})
        assert isinstance(even, ProbabilityMeasure)
        assert even.apply({2}) == Fraction(1, 3)
        assert even.apply({1, 3, 5}) == 0
        assert even.total_mass() == 1

    def test_cond_on_null_set_fails(self, die):
        measure = ProbabilityMeasure.dirac(die, 1)
        with pytest.raises(NotTotalToOne, match="cannot condition"):
            measure.cond({2, 3})

    def test_cond_on_finite_measure(self, die):
        counting = Measure.counting(die)
        conditioned = cond(counting, {1, 2})
        assert conditioned.apply({1}) == Fraction(1, 2)

    def test_cond_on_infinite_set_fails(self, die):
        measure = Measure.from_point_masses(die, {1: math.inf})
        with pytest.raises(NotTotalToOne):
            cond(measure, {1, 2})


class TestProbabilityPushforward:
    """Закон величины относительно вероятностной меры."""

    def test_law_is_probability(self, fair, die):
        parity = RandomVariable.real(lambda w: w % 2, die)
        law = fair.pushforward(parity)
        assert isinstance(law, ProbabilityMeasure)
        assert law.apply({0}) == Fraction(1, 2)

    def test_map_alias(self, fair, die):
        parity = RandomVariable.real(lambda w: w % 2, die)
        assert fair.map(parity) == fair.pushforward(parity)

    def test_describe_marks_probability(self, fair):
        description = fair.describe()
        assert description.is_probability
        assert description.total_mass == "1"
