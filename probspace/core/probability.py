"""
ProbabilityMeasure — мера с инвариантом нормировки μ(Ω) = 1

Это уточнение валидности, а не отдельный формат хранения: ProbabilityMeasure
является Measure с теми же массами атомов, сконструированной только после
проверки полной массы.

Нормировка:
- int/Fraction: точное равенство μ(Ω) = 1
- float: сравнение с толерантностью ToleranceConfig

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. wrap(μ) с μ(Ω) ≠ 1 → NotTotalToOne (частично валидный объект не создаётся)
2. apply никогда не возвращает значение > 1 или ∞: постусловие проверяется
   при каждом вызове, нарушение → NotTotalToOne
3. Значение float, превышающее 1 в пределах толерантности (накопленная
   ошибка округления суммы атомов), возвращается как 1.0
"""

import logging
from collections.abc import Iterable, Mapping
from fractions import Fraction
from typing import Optional

from probspace.core.config import ToleranceConfig
from probspace.core.errors import Checked, NotTotalToOne, attempt
from probspace.core.math.numerical_safeguards import (
    MeasureValue,
    format_value,
    is_infinite,
    is_zero,
    reciprocal,
)
from probspace.core.measure import Measure
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra, sorted_outcomes

logger = logging.getLogger(__name__)


class ProbabilityMeasure(Measure):
    """Вероятностная мера: Measure с проверенной полной массой 1."""

    __slots__ = ()

    _is_probability = True

    def __init__(self, measure: Measure, tolerance: Optional[ToleranceConfig] = None):
        """
        Args:
            measure: оборачиваемая мера
            tolerance: толерантность для float (default: толерантность меры)

        Raises:
            NotTotalToOne: Если μ(Ω) ≠ 1
        """
        if not isinstance(measure, Measure):
            raise TypeError(f"expected a Measure, got {type(measure).__name__}")

        tolerance = tolerance or measure.tolerance
        total = measure.total_mass()

        if is_infinite(total) or not tolerance.close(total, 1):
            logger.warning(
                "Rejected probability wrap of %s: total mass %s",
                measure.identifier,
                format_value(total),
            )
            raise NotTotalToOne(
                f"total mass of {measure.identifier} is {format_value(total)}, expected 1"
            )

        self._init_state(measure.sigma_algebra, measure.masses, measure.name, tolerance)

    @classmethod
    def wrap(
        cls, measure: Measure, tolerance: Optional[ToleranceConfig] = None
    ) -> "ProbabilityMeasure":
        return cls(measure, tolerance)

    @classmethod
    def try_wrap(
        cls, measure: Measure, tolerance: Optional[ToleranceConfig] = None
    ) -> Checked["ProbabilityMeasure"]:
        return attempt(cls, measure, tolerance)

    @classmethod
    def _from_masses(
        cls,
        sigma_algebra: SigmaAlgebra,
        masses: Mapping,
        name: Optional[str] = None,
        tolerance: Optional[ToleranceConfig] = None,
    ) -> "ProbabilityMeasure":
        return cls(Measure._from_masses(sigma_algebra, masses, name, tolerance), tolerance)

    @classmethod
    def uniform(cls, sigma_algebra: SigmaAlgebra, name: Optional[str] = None) -> "ProbabilityMeasure":
        """
        Равномерная мера: масса атома пропорциональна числу его исходов.

        Raises:
            NotTotalToOne: Если Ω пусто
        """
        n = len(sigma_algebra.omega)
        if n == 0:
            raise NotTotalToOne("uniform measure on an empty sample space has total mass 0")
        masses = {atom: Fraction(len(atom), n) for atom in sigma_algebra.atoms}
        return cls._from_masses(sigma_algebra, masses, name or "uniform")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def apply(self, subset: Iterable) -> MeasureValue:
        """
        Вероятность измеримого события.

        Raises:
            NotMeasurable: Если событие не измеримо
            NotTotalToOne: Если значение вне [0, 1]
        """
        value = super().apply(subset)

        if is_infinite(value) or value < 0:
            raise NotTotalToOne(f"probability {format_value(value)} is outside [0, 1]")

        if value > 1:
            if not self._tolerance.close(value, 1):
                raise NotTotalToOne(f"probability {format_value(value)} exceeds 1")
            return 1.0

        return value

    def prob_compl(self, subset: Iterable) -> MeasureValue:
        """P(Aᶜ) = 1 - P(A)."""
        return 1 - self.apply(subset)

    def cond(self, subset: Iterable) -> "ProbabilityMeasure":
        return cond(self, subset)

    def pushforward(self, random_variable: RandomVariable) -> "ProbabilityMeasure":
        """Закон X относительно вероятностной меры — вероятностная мера."""
        return ProbabilityMeasure(super().pushforward(random_variable), self._tolerance)

    def map(self, random_variable: RandomVariable) -> "ProbabilityMeasure":
        return self.pushforward(random_variable)


# =============================================================================
# FUNCTIONS
# =============================================================================


def cond(measure: Measure, subset: Iterable) -> ProbabilityMeasure:
    """
    Условная вероятностная мера μ(· | S) = μ|_S / μ(S).

    Raises:
        NotMeasurable: Если S не измеримо
        NotTotalToOne: Если μ(S) равно 0 или ∞
    """
    mass = Measure.apply(measure, subset)

    if is_zero(mass, measure.tolerance.abs_tol) or is_infinite(mass):
        raise NotTotalToOne(
            f"cannot condition on {sorted_outcomes(subset)}: its measure is {format_value(mass)}"
        )

    conditioned = measure.restrict(subset).scale(reciprocal(mass))
    return ProbabilityMeasure(conditioned, measure.tolerance)


def is_probability_measure(
    measure: Measure, tolerance: Optional[ToleranceConfig] = None
) -> bool:
    return ProbabilityMeasure.try_wrap(measure, tolerance).ok
