"""
Martingale — адаптированные процессы и мартингальные соотношения

- Адаптированность: X_i измерима относительно F_i для каждого i
- Мартингал: адаптирован, интегрируем и E[X_j | F_i] = X_i μ-п.в. для i ≤ j
- Субмартингал: X_i ≤ E[X_j | F_i]; супермартингал: X_i ≥ E[X_j | F_i]

Условные ожидания вычисляются точно на атомах F_i (см. core.conditional).
"""

import itertools
import logging
from enum import Enum
from typing import Optional

from probspace.core.conditional import conditional_expectation
from probspace.core.errors import NotIntegrable
from probspace.core.measure import Measure
from probspace.core.random_variable import Integrator
from probspace.process.filtration import Filtration
from probspace.process.stochastic_process import StochasticProcess

logger = logging.getLogger(__name__)


class MartingaleKind(str, Enum):
    """Тип мартингального соотношения."""

    MARTINGALE = "MARTINGALE"
    SUBMARTINGALE = "SUBMARTINGALE"
    SUPERMARTINGALE = "SUPERMARTINGALE"


def is_adapted(process: StochasticProcess, filtration: Filtration) -> bool:
    """
    Процесс адаптирован к фильтрации.

    Индекс процесса вне окна фильтрации делает процесс неадаптированным.
    """
    for i in process.indices:
        if i not in filtration:
            return False
        if not process.at(i).is_measurable_wrt(filtration.at(i)):
            return False
    return True


def _is_integrable(
    process: StochasticProcess, measure: Measure, integrator: Optional[Integrator]
) -> bool:
    for i in process.indices:
        try:
            process.at(i).expectation(measure, integrator)
        except NotIntegrable as e:
            logger.debug("X_%r is not integrable: %s", i, e)
            return False
    return True


def satisfies_martingale_relation(
    process: StochasticProcess,
    filtration: Filtration,
    measure: Measure,
    kind: MartingaleKind = MartingaleKind.MARTINGALE,
    integrator: Optional[Integrator] = None,
) -> bool:
    """
    Проверка мартингального соотношения на окне индексов.

    Raises:
        InvalidSubalgebra: Если F_i не вложена в sigma-алгебру меры
    """
    if not is_adapted(process, filtration):
        return False
    if not _is_integrable(process, measure, integrator):
        return False

    le = filtration.le
    for i, j in itertools.permutations(process.indices, 2):
        if not le(i, j):
            continue

        x_i = process.at(i)
        projected = conditional_expectation(process.at(j), measure, filtration.at(i), integrator)

        if kind == MartingaleKind.MARTINGALE:
            holds = measure.ae_equal(x_i, projected)
        elif kind == MartingaleKind.SUBMARTINGALE:
            holds = measure.ae_le(x_i, projected)
        else:
            holds = measure.ae_le(projected, x_i)

        if not holds:
            logger.debug("%s relation fails between indices %r and %r", kind.value, i, j)
            return False

    return True


def is_martingale(
    process: StochasticProcess,
    filtration: Filtration,
    measure: Measure,
    integrator: Optional[Integrator] = None,
) -> bool:
    return satisfies_martingale_relation(
        process, filtration, measure, MartingaleKind.MARTINGALE, integrator
    )


def is_submartingale(
    process: StochasticProcess,
    filtration: Filtration,
    measure: Measure,
    integrator: Optional[Integrator] = None,
) -> bool:
    return satisfies_martingale_relation(
        process, filtration, measure, MartingaleKind.SUBMARTINGALE, integrator
    )


def is_supermartingale(
    process: StochasticProcess,
    filtration: Filtration,
    measure: Measure,
    integrator: Optional[Integrator] = None,
) -> bool:
    return satisfies_martingale_relation(
        process, filtration, measure, MartingaleKind.SUPERMARTINGALE, integrator
    )
