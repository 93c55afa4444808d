"""
Independence — независимость случайных величин, событий и sigma-алгебр

Семейство sigma-алгебр {F_k} независимо относительно μ, если для каждого
конечного подсемейства J (|J| ≥ 2) и множеств A_j ∈ F_j:

    μ(∩ A_j) = Π μ(A_j)

На конечных sigma-алгебрах достаточно проверить равенство на атомах:
атомы вместе с ∅ образуют π-систему, и по аддитивности факторизация
распространяется на все объединения атомов.

Попарная независимость проверяется отдельной функцией и никогда не
подменяет независимость семейства.

Условная независимость относительно под-алгебры G: факторизация относительно
μ(· | B) для каждого атома B алгебры G положительной меры. Требует
свидетельства вложенности G ⊆ F (SubalgebraWitness).
"""

import itertools
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from probspace.core.conditional import SubalgebraWitness, resolve_witness
from probspace.core.errors import InvalidSubalgebra, NotMeasurable
from probspace.core.math.numerical_safeguards import (
    MeasureValue,
    ext_prod,
    format_value,
    is_zero,
)
from probspace.core.measure import Measure
from probspace.core.probability import cond
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import SigmaAlgebra

logger = logging.getLogger(__name__)


# =============================================================================
# REPORT
# =============================================================================


@dataclass(frozen=True)
class IndependenceReport:
    """Результат проверки независимости."""

    independent: bool
    checked_families: int

    # Первое нарушение (если есть)
    failing_family: Optional[tuple]
    joint: Optional[MeasureValue]
    product: Optional[MeasureValue]
    conditioning_atom: Optional[frozenset]

    # Детали
    details: str


# =============================================================================
# CORE CHECK
# =============================================================================


def _factorization_report(
    events: Sequence[Sequence[frozenset]],
    measure: Measure,
    max_family_size: Optional[int] = None,
    conditioning_atom: Optional[frozenset] = None,
) -> IndependenceReport:
    """
    Проверка факторизации для подсемейств размера 2..max_family_size.

    events[k] — атомы (порождающая π-система) k-го члена семейства.
    """
    n = len(events)
    upper = n if max_family_size is None else min(max_family_size, n)
    checked = 0

    for size in range(2, upper + 1):
        for family in itertools.combinations(range(n), size):
            checked += 1
            for choice in itertools.product(*(events[k] for k in family)):
                joint = measure.apply(frozenset.intersection(*choice))
                product = ext_prod(measure.apply(a) for a in choice)
                if not measure.tolerance.close(joint, product):
                    details = (
                        f"family {family}: measure of intersection "
                        f"{format_value(joint)} != product {format_value(product)}"
                    )
                    logger.debug("Independence fails: %s", details)
                    return IndependenceReport(
                        independent=False,
                        checked_families=checked,
                        failing_family=family,
                        joint=joint,
                        product=product,
                        conditioning_atom=conditioning_atom,
                        details=details,
                    )

    return IndependenceReport(
        independent=True,
        checked_families=checked,
        failing_family=None,
        joint=None,
        product=None,
        conditioning_atom=conditioning_atom,
        details=f"{checked} sub-families factorize",
    )


def _conditional_report(
    events: Sequence[Sequence[frozenset]],
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
    max_family_size: Optional[int] = None,
) -> IndependenceReport:
    witness = resolve_witness(conditioning, measure)

    if not measure.is_finite():
        raise ValueError("conditional independence requires a finite measure")

    checked = 0
    for atom in witness.sub.atoms:
        if is_zero(measure.apply(atom), measure.tolerance.abs_tol):
            continue
        report = _factorization_report(events, cond(measure, atom), max_family_size, atom)
        checked += report.checked_families
        if not report.independent:
            return report

    return IndependenceReport(
        independent=True,
        checked_families=checked,
        failing_family=None,
        joint=None,
        product=None,
        conditioning_atom=None,
        details=f"{checked} sub-families factorize on every conditioning atom",
    )


# =============================================================================
# EVENT FAMILIES
# =============================================================================


def _variable_events(variables: Sequence[RandomVariable], measure: Measure) -> list:
    events = []
    for rv in variables:
        if not rv.is_measurable_wrt(measure.sigma_algebra):
            raise NotMeasurable(
                f"{rv.identifier} is not measurable with respect to {measure.sigma_algebra.identifier}"
            )
        events.append(rv.generated_sigma_algebra().atoms)
    return events


def _set_events(sets: Iterable[Iterable], measure: Measure) -> list:
    omega = measure.sigma_algebra.omega
    events = []
    for s in sets:
        event = measure.sigma_algebra.require_measurable(s)
        events.append(tuple(part for part in (event, omega - event) if part))
    return events


def _algebra_events(algebras: Sequence[SigmaAlgebra], measure: Measure) -> list:
    for algebra in algebras:
        if not algebra.is_sub_algebra_of(measure.sigma_algebra):
            raise InvalidSubalgebra(
                f"{algebra.identifier} is not a sub-sigma-algebra of {measure.sigma_algebra.identifier}"
            )
    return [algebra.atoms for algebra in algebras]


def _require_family(members: Sequence, kind: str) -> None:
    if len(members) < 2:
        raise ValueError(f"independence requires at least two {kind}, got {len(members)}")


# =============================================================================
# PUBLIC API
# =============================================================================


def explain_independence(
    variables: Sequence[RandomVariable], measure: Measure
) -> IndependenceReport:
    """
    Подробная проверка независимости случайных величин.

    Raises:
        NotMeasurable: Если величина не измерима относительно меры
    """
    variables = list(variables)
    _require_family(variables, "random variables")
    return _factorization_report(_variable_events(variables, measure), measure)


def check_independence(variables: Sequence[RandomVariable], measure: Measure) -> bool:
    """
    Независимость семейства случайных величин (все конечные подсемейства).

    Для двух величин X, Y: μ(X⁻¹(a) ∩ Y⁻¹(b)) = law(X)(a) · law(Y)(b).
    """
    return explain_independence(variables, measure).independent


def pairwise_independent(variables: Sequence[RandomVariable], measure: Measure) -> bool:
    """Попарная независимость (необходимое, но не достаточное условие)."""
    variables = list(variables)
    _require_family(variables, "random variables")
    return _factorization_report(
        _variable_events(variables, measure), measure, max_family_size=2
    ).independent


def independent_sets(sets: Sequence[Iterable], measure: Measure) -> bool:
    """
    Независимость семейства событий.

    Raises:
        NotMeasurable: Если событие не измеримо
    """
    sets = list(sets)
    _require_family(sets, "sets")
    return _factorization_report(_set_events(sets, measure), measure).independent


def independent_sigma_algebras(algebras: Sequence[SigmaAlgebra], measure: Measure) -> bool:
    """
    Независимость семейства под-алгебр.

    Raises:
        InvalidSubalgebra: Если алгебра не вложена в sigma-алгебру меры
    """
    algebras = list(algebras)
    _require_family(algebras, "sigma-algebras")
    return _factorization_report(_algebra_events(algebras, measure), measure).independent


def explain_conditional_independence(
    variables: Sequence[RandomVariable],
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
) -> IndependenceReport:
    """
    Raises:
        InvalidSubalgebra: Если conditioning не вложена в sigma-алгебру меры
        NotMeasurable: Если величина не измерима относительно меры
    """
    variables = list(variables)
    _require_family(variables, "random variables")
    return _conditional_report(_variable_events(variables, measure), measure, conditioning)


def check_conditional_independence(
    variables: Sequence[RandomVariable],
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
) -> bool:
    """Условная независимость величин относительно под-алгебры."""
    return explain_conditional_independence(variables, measure, conditioning).independent


def conditionally_independent_sets(
    sets: Sequence[Iterable],
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
) -> bool:
    sets = list(sets)
    _require_family(sets, "sets")
    return _conditional_report(_set_events(sets, measure), measure, conditioning).independent


def conditionally_independent_sigma_algebras(
    algebras: Sequence[SigmaAlgebra],
    measure: Measure,
    conditioning: Union[SubalgebraWitness, SigmaAlgebra],
) -> bool:
    algebras = list(algebras)
    _require_family(algebras, "sigma-algebras")
    return _conditional_report(
        _algebra_events(algebras, measure), measure, conditioning
    ).independent
