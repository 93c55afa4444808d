"""
CanonicalMeasureSpace — sigma-алгебра с одной выделенной мерой ("volume")

Две поверхности API над одним типом Measure:
- явная (мера передаётся параметром): Measure, RandomVariable.law(μ), ...
- выделенная (мера берётся из пространства): CanonicalMeasureSpace.law(X), ...

CanonicalMeasureSpace не запрещает определять другие меры на той же
sigma-алгебре; все методы пространства делегируют явному API с volume().
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from probspace.core.config import ToleranceConfig
from probspace.core.errors import Checked
from probspace.core.independence import check_independence
from probspace.core.math.numerical_safeguards import MeasureValue
from probspace.core.measure import Measure
from probspace.core.probability import ProbabilityMeasure
from probspace.core.random_variable import Integrator, RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra

logger = logging.getLogger(__name__)


class CanonicalMeasureSpace:
    """Измеримое пространство с выделенной мерой volume."""

    __slots__ = ("_sigma_algebra", "_volume", "_name")

    def __init__(self, sigma_algebra: SigmaAlgebra, volume: Measure, name: Optional[str] = None):
        """
        Raises:
            ValueError: Если volume определена на другой sigma-алгебре
        """
        if volume.sigma_algebra != sigma_algebra:
            raise ValueError(
                f"volume is defined on {volume.sigma_algebra.identifier}, "
                f"not on {sigma_algebra.identifier}"
            )
        self._sigma_algebra = sigma_algebra
        self._volume = volume
        self._name = name
        logger.debug("Constructed canonical measure space over %s", sigma_algebra.identifier)

    @classmethod
    def discrete_uniform(cls, omega: Iterable, name: Optional[str] = None) -> "CanonicalMeasureSpace":
        """Дискретное пространство с равномерной вероятностной мерой."""
        sigma_algebra = SigmaAlgebra.discrete(omega)
        return cls(sigma_algebra, ProbabilityMeasure.uniform(sigma_algebra), name=name)

    @classmethod
    def counting(cls, omega: Iterable, name: Optional[str] = None) -> "CanonicalMeasureSpace":
        """Дискретное пространство со считающей мерой."""
        sigma_algebra = SigmaAlgebra.discrete(omega)
        return cls(sigma_algebra, Measure.counting(sigma_algebra), name=name)

    @property
    def sigma_algebra(self) -> SigmaAlgebra:
        return self._sigma_algebra

    @property
    def identifier(self) -> str:
        return self._name or f"space[{self._volume.identifier}]"

    def volume(self) -> Measure:
        return self._volume

    def as_probability_space(self, tolerance: Optional[ToleranceConfig] = None) -> ProbabilityMeasure:
        """
        Raises:
            NotTotalToOne: Если volume(Ω) ≠ 1
        """
        return ProbabilityMeasure.wrap(self._volume, tolerance)

    def try_as_probability_space(
        self, tolerance: Optional[ToleranceConfig] = None
    ) -> Checked[ProbabilityMeasure]:
        return ProbabilityMeasure.try_wrap(self._volume, tolerance)

    # -------------------------------------------------------------------------
    # Designated-measure API
    # -------------------------------------------------------------------------

    def measure_of(self, subset: Iterable) -> MeasureValue:
        return self._volume.apply(subset)

    def law(self, random_variable: RandomVariable) -> Measure:
        return random_variable.law(self._volume)

    def expectation(
        self, random_variable: RandomVariable, integrator: Optional[Integrator] = None
    ) -> MeasureValue:
        return random_variable.expectation(self._volume, integrator)

    def independent(self, variables: Sequence[RandomVariable]) -> bool:
        return check_independence(variables, self._volume)

    def __repr__(self) -> str:
        return f"CanonicalMeasureSpace({self.identifier})"
