"""
Conditional — под-алгебры и условное математическое ожидание

SubalgebraWitness удостоверяет вложенность G ⊆ F и требуется всеми
условными операциями (условная независимость, условное ожидание).

Условное ожидание E_μ[X | G] на конечной G постоянно на атомах G:
    E[X | G](ω) = E_μ[X · 1_B] / μ(B),  B — атом G, содержащий ω
На атомах меры 0 значение определено только почти всюду; выбирается 0.
"""

from dataclasses import dataclass
from typing import Optional, Union

from probspace.core.errors import InvalidSubalgebra, NotIntegrable, NotMeasurable
from probspace.core.math.numerical_safeguards import (
    format_value,
    is_infinite,
    is_zero,
    reciprocal,
)
from probspace.core.measure import Measure
from probspace.core.random_variable import Integrator, RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra, sorted_outcomes


@dataclass(frozen=True)
class SubalgebraWitness:
    """Свидетельство вложенности sub ⊆ ambient. Создаётся certify_subalgebra."""

    sub: SigmaAlgebra
    ambient: SigmaAlgebra


def certify_subalgebra(sub: SigmaAlgebra, ambient: SigmaAlgebra) -> SubalgebraWitness:
    """
    Raises:
        InvalidSubalgebra: Если sub не является под-алгеброй ambient
    """
    if not sub.is_sub_algebra_of(ambient):
        raise InvalidSubalgebra(
            f"{sub.identifier} is not a sub-sigma-algebra of {ambient.identifier}"
        )
    return SubalgebraWitness(sub=sub, ambient=ambient)


def resolve_witness(
    conditioning: Union[SubalgebraWitness, SigmaAlgebra], measure: Measure
) -> SubalgebraWitness:
    """
    Свидетельство вложенности conditioning в sigma-алгебру меры.

    Raises:
        InvalidSubalgebra: Если вложенность не выполняется или witness
            удостоверяет вложенность в другую алгебру
    """
    if isinstance(conditioning, SigmaAlgebra):
        return certify_subalgebra(conditioning, measure.sigma_algebra)
    if not isinstance(conditioning, SubalgebraWitness):
        raise InvalidSubalgebra("a sub-algebra containment witness is required")
    if conditioning.ambient != measure.sigma_algebra:
        raise InvalidSubalgebra(
            f"witness certifies containment in {conditioning.ambient.identifier}, "
            f"not in {measure.sigma_algebra.identifier}"
        )
    return conditioning


def conditional_expectation(
    random_variable: RandomVariable,
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
    integrator: Optional[Integrator] = None,
    name: Optional[str] = None,
) -> RandomVariable:
    """
    E_μ[X | G] как действительнозначная величина, измеримая относительно G.

    Raises:
        InvalidSubalgebra: Если G не вложена в sigma-алгебру меры
        NotMeasurable: Если X определена на другом Ω или не измерима для меры
        NotIntegrable: Если X не интегрируема на атоме G или атом имеет меру ∞
    """
    witness = resolve_witness(conditioning, measure)
    if not random_variable.is_measurable_wrt(measure.sigma_algebra):
        raise NotMeasurable(
            f"{random_variable.identifier} is not measurable with respect to "
            f"{measure.sigma_algebra.identifier}"
        )

    values = {}
    for atom in witness.sub.atoms:
        mass = measure.apply(atom)
        if is_zero(mass, measure.tolerance.abs_tol):
            value = 0
        elif is_infinite(mass):
            raise NotIntegrable(
                f"conditioning atom {sorted_outcomes(atom)} has measure {format_value(mass)}"
            )
        else:
            value = random_variable.expectation(measure.restrict(atom), integrator) * reciprocal(mass)
        for outcome in atom:
            values[outcome] = value

    return RandomVariable.real(
        values,
        witness.sub,
        name=name or f"E[{random_variable.identifier}|{witness.sub.identifier}]",
    )
