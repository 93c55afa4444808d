"""
Тесты для Measure.

Coverage:
- Конструирование из функции назначения (FULL / SAMPLED / TRUSTED)
- Аддитивность, монотонность, μ(∅) = 0
- Именованные конструкторы: atom masses / point masses / dirac / counting / zero
- Производные меры: restrict / scale / сумма / pushforward
- Равенство по значению
"""

import itertools
import math
from fractions import Fraction

import pytest

from probspace.core.config import MeasureValidationConfig, ToleranceConfig, ValidationMode
from probspace.core.errors import MeasureViolation, NotMeasurable
from probspace.core.measure import Measure
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra

OMEGA = {"a", "b", "c", "d"}
WEIGHTS = {"a": Fraction(1, 8), "b": Fraction(1, 8), "c": Fraction(1, 4), "d": Fraction(1, 2)}


@pytest.fixture
def discrete():
    return SigmaAlgebra.discrete(OMEGA)


@pytest.fixture
def weighted(discrete):
    return Measure.from_point_masses(discrete, WEIGHTS, name="weighted")


def weight_of(subset):
    return sum((WEIGHTS[w] for w in subset), Fraction(0))


class TestConstruction:
    """Конструирование из функции назначения."""

    def test_additive_assignment_accepted(self, discrete):
        measure = Measure(discrete, weight_of)
        assert measure.apply({"a", "d"}) == Fraction(5, 8)
        assert measure.total_mass() == 1

    def test_empty_set_must_be_zero(self, discrete):
        with pytest.raises(MeasureViolation, match="empty set must be 0"):
            Measure(discrete, lambda s: weight_of(s) + 1)

    def test_negative_mass_rejected(self, discrete):
        with pytest.raises(MeasureViolation, match="non-negative"):
            Measure(discrete, lambda s: -len(s))

    def test_nan_mass_rejected(self, discrete):
        with pytest.raises(MeasureViolation, match="NaN"):
            Measure(discrete, lambda s: math.nan if s else 0)

    def test_non_numeric_mass_rejected(self, discrete):
        with pytest.raises(MeasureViolation, match="real number"):
            Measure(discrete, lambda s: "one" if s else 0)

    def test_non_additive_assignment_rejected(self, discrete):
        """ν(S) = |S|² не аддитивна."""
        with pytest.raises(MeasureViolation, match="not additive"):
            Measure(discrete, lambda s: len(s) ** 2)

    def test_trusted_mode_skips_additivity(self, discrete):
        """TRUSTED: значения вне атомов не запрашиваются, мера строится по атомам."""
        config = MeasureValidationConfig(mode=ValidationMode.TRUSTED)
        measure = Measure(discrete, lambda s: len(s) ** 2, config=config)
        assert measure.apply(OMEGA) == 4

    def test_sampled_mode_detects_violation(self, discrete):
        config = MeasureValidationConfig(mode=ValidationMode.SAMPLED, sample_size=64, seed=7)
        with pytest.raises(MeasureViolation):
            Measure(discrete, lambda s: len(s) ** 2, config=config)

    def test_large_space_falls_back_to_sampling(self):
        """Выше порога атомов FULL проверяет выборку объединений."""
        sigma = SigmaAlgebra.discrete(range(20))
        config = MeasureValidationConfig(max_exhaustive_atoms=4, sample_size=32)
        measure = Measure(sigma, lambda s: len(s), config=config)
        assert measure.total_mass() == 20

    def test_float_assignment_within_tolerance(self, discrete):
        measure = Measure(discrete, lambda s: sum(0.1 for _ in s))
        assert measure.apply(OMEGA) == pytest.approx(0.4)

    def test_config_validation(self):
        with pytest.raises(ValueError, match="sample_size"):
            MeasureValidationConfig(sample_size=0)
        with pytest.raises(ValueError, match="max_exhaustive_atoms"):
            MeasureValidationConfig(max_exhaustive_atoms=-1)
        with pytest.raises(ValueError, match="rel_tol"):
            ToleranceConfig(rel_tol=-1.0)
        with pytest.raises(ValueError, match="rel_tol must be <= 1.0"):
            ToleranceConfig(rel_tol=2.0)
        with pytest.raises(ValueError, match="sample_size must be >= 1"):
            MeasureValidationConfig(sample_size=-5)


class TestMeasureAxioms:
    """μ(∅) = 0, аддитивность и монотонность."""

    def test_empty_set(self, weighted):
        assert weighted.apply(set()) == 0

    def test_additivity_on_disjoint_sets(self, weighted, discrete):
        sets = list(discrete.measurable_sets())
        for a, b in itertools.product(sets, repeat=2):
            if a & b:
                continue
            assert weighted.apply(a | b) == weighted.apply(a) + weighted.apply(b)

    def test_monotonicity(self, weighted, discrete):
        sets = list(discrete.measurable_sets())
        for a, b in itertools.product(sets, repeat=2):
            if a <= b:
                assert weighted.apply(a) <= weighted.apply(b)

    def test_non_measurable_set_raises(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{"a", "b"}])
        measure = Measure.counting(sigma)
        with pytest.raises(NotMeasurable):
            measure.apply({"a"})

    def test_call_is_apply(self, weighted):
        assert weighted({"c"}) == weighted.apply({"c"})


class TestNamedConstructors:
    """Именованные конструкторы мер."""

    def test_from_atom_masses(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{"a", "b"}])
        measure = Measure.from_atom_masses(sigma, {frozenset({"a", "b"}): 3})
        assert measure.apply({"a", "b"}) == 3
        assert measure.apply({"c", "d"}) == 0

    def test_from_atom_masses_rejects_non_atom(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{"a", "b"}])
        with pytest.raises(MeasureViolation, match="is not an atom"):
            Measure.from_atom_masses(sigma, {frozenset({"a"}): 1})

    def test_from_point_masses_rejects_foreign_outcome(self, discrete):
        with pytest.raises(MeasureViolation, match="outside the sample space"):
            Measure.from_point_masses(discrete, {"z": 1})

    def test_from_point_masses_rejects_negative(self, discrete):
        with pytest.raises(MeasureViolation):
            Measure.from_point_masses(discrete, {"a": -1})

    def test_dirac(self, discrete):
        delta = Measure.dirac(discrete, "c")
        assert delta.apply({"c", "d"}) == 1
        assert delta.apply({"a", "b"}) == 0

    def test_counting(self, discrete):
        counting = Measure.counting(discrete)
        assert counting.apply({"a", "b", "c"}) == 3
        assert counting.is_finite()

    def test_zero(self, discrete):
        zero = Measure.zero(discrete)
        assert zero.total_mass() == 0
        assert zero.is_null(OMEGA)

    def test_infinite_measure(self, discrete):
        measure = Measure.from_point_masses(discrete, {"a": math.inf, "b": 1})
        assert not measure.is_finite()
        assert measure.apply({"b"}) == 1
        assert math.isinf(measure.apply({"a", "b"}))


class TestNullSets:
    """Нулевые множества и равенство почти всюду."""

    def test_outer_null_for_non_measurable_set(self):
        sigma = SigmaAlgebra.generated_by(OMEGA, [{"a", "b"}])
        measure = Measure.from_atom_masses(sigma, {frozenset({"c", "d"}): 1})
        assert measure.outer_null({"a"})
        assert not measure.outer_null({"c"})

    def test_ae_equal(self, discrete):
        measure = Measure.from_point_masses(discrete, {"a": 1, "b": 1})
        f = {"a": 0, "b": 1, "c": 5, "d": 5}
        g = {"a": 0, "b": 1, "c": 7, "d": 9}
        assert measure.ae_equal(f, g)
        assert not measure.ae_equal(f, {"a": 1, "b": 1, "c": 5, "d": 5})

    def test_ae_le(self, discrete):
        measure = Measure.from_point_masses(discrete, {"a": 1})
        assert measure.ae_le(lambda w: 2 if w == "b" else 0, lambda w: 1)
        assert not measure.ae_le(lambda w: 2, lambda w: 1)


class TestDerivedMeasures:
    """restrict / scale / сумма."""

    def test_restrict(self, weighted):
        restricted = weighted.restrict({"c", "d"})
        assert restricted.apply(OMEGA) == Fraction(3, 4)
        assert restricted.apply({"a"}) == 0

    def test_scale(self, weighted):
        doubled = weighted.scale(2)
        assert doubled.apply({"d"}) == 1
        assert doubled.total_mass() == 2

    def test_scale_by_infinity_keeps_null_sets(self, discrete):
        measure = Measure.from_point_masses(discrete, {"a": 1})
        scaled = measure.scale(math.inf)
        assert math.isinf(scaled.apply({"a"}))
        assert scaled.apply({"b"}) == 0

    def test_sum(self, weighted, discrete):
        total = weighted + Measure.counting(discrete)
        assert total.apply({"d"}) == Fraction(3, 2)

    def test_sum_requires_same_algebra(self, weighted):
        other = Measure.counting(SigmaAlgebra.trivial(OMEGA))
        with pytest.raises(ValueError, match="different sigma-algebras"):
            weighted + other


class TestPushforward:
    """Образ меры при случайной величине."""

    def test_pushforward_masses(self, weighted, discrete):
        parity = RandomVariable.real({"a": 0, "b": 1, "c": 0, "d": 1}, discrete)
        law = weighted.pushforward(parity)
        assert law.apply({0}) == Fraction(3, 8)
        assert law.apply({1}) == Fraction(5, 8)
        assert law.total_mass() == weighted.total_mass()

    def test_pushforward_requires_measurability(self, discrete):
        coarse = SigmaAlgebra.generated_by(OMEGA, [{"a", "b"}])
        measure = Measure.counting(coarse)
        rv = RandomVariable.real({"a": 0, "b": 1, "c": 0, "d": 1}, discrete)
        with pytest.raises(NotMeasurable):
            measure.pushforward(rv)

    def test_pushforward_rejects_non_random_variable(self, weighted):
        with pytest.raises(TypeError):
            weighted.pushforward(lambda w: 0)

    def test_pushforward_is_recomputed_but_equal(self, weighted, discrete):
        rv = RandomVariable.real({"a": 0, "b": 1, "c": 0, "d": 1}, discrete)
        first = weighted.pushforward(rv)
        second = weighted.pushforward(rv)
        assert first is not second
        assert first == second
        assert hash(first) == hash(second)


class TestValueSemantics:
    """Равенство мер по значению."""

    def test_equal_masses_equal_measures(self, discrete):
        a = Measure.from_point_masses(discrete, {"a": 1}, name="first")
        b = Measure.dirac(discrete, "a")
        assert a == b

    def test_float_and_fraction_close(self, discrete):
        a = Measure.from_point_masses(discrete, {"a": 0.25, "b": 0.75})
        b = Measure.from_point_masses(discrete, {"a": Fraction(1, 4), "b": Fraction(3, 4)})
        assert a == b

    def test_different_algebras_not_equal(self):
        a = Measure.zero(SigmaAlgebra.discrete(OMEGA))
        b = Measure.zero(SigmaAlgebra.trivial(OMEGA))
        assert a != b

    def test_describe(self, weighted):
        description = weighted.describe()
        assert description.identifier == "weighted"
        assert description.total_mass == "1"
        assert description.is_finite
        assert not description.is_probability
        assert [item.mass for item in description.atom_masses] == ["1/8", "1/8", "1/4", "1/2"]
