"""
StoppingTime — случайный индекс, согласованный с фильтрацией

τ: Ω → ι ∪ {TOP} является моментом остановки относительно {F_i}, если для
каждого индекса i окна фильтрации множество {ω : τ(ω) ≤ i} измеримо в F_i.

Кодомен расширен явным элементом TOP ("никогда не останавливается"):
TOP больше любого индекса и не входит ни в одно {j ≤ i}. Без TOP момент
остановки на неограниченном дискретном ι не может представлять
бесконечное ожидание.

Значения τ вне окна фильтрации допустимы (например, константа 2 при окне
{0, 1}): проверяются только индексы окна.
"""

import logging
from collections.abc import Hashable, Iterable
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from probspace.core.errors import Checked, StoppingTimeViolation, attempt
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import OutcomeFunction, as_event, sorted_outcomes, tabulate
from probspace.process.filtration import Filtration
from probspace.process.stochastic_process import StochasticProcess

logger = logging.getLogger(__name__)


class Never(Enum):
    """Верхний элемент кодомена момента остановки."""

    TOP = "TOP"

    def __repr__(self) -> str:
        return "TOP"


TOP = Never.TOP


def _stopped_by(value: Any, index: Hashable, filtration: Filtration) -> bool:
    """τ(ω) ≤ i, с TOP больше любого индекса."""
    return value is not TOP and filtration.le(value, index)


def _first_violation(table: Mapping, filtration: Filtration) -> Optional[tuple]:
    for index in filtration.indices:
        event = frozenset(w for w, v in table.items() if _stopped_by(v, index, filtration))
        if not filtration.at(index).is_measurable(event):
            return index, event
    return None


def is_stopping_time(function: OutcomeFunction, filtration: Filtration) -> bool:
    """Проверка условия момента остановки на окне фильтрации."""
    table = tabulate(function, filtration.ambient.omega)
    return _first_violation(table, filtration) is None


class StoppingTime:
    """Момент остановки относительно фильтрации."""

    __slots__ = ("_table", "_filtration", "_name")

    def __init__(
        self,
        function: OutcomeFunction,
        filtration: Filtration,
        name: Optional[str] = None,
    ):
        """
        Raises:
            StoppingTimeViolation: Если {τ ≤ i} не измеримо в F_i для некоторого i
        """
        table = tabulate(function, filtration.ambient.omega)
        violation = _first_violation(table, filtration)
        if violation is not None:
            index, event = violation
            logger.warning("Rejected stopping time: {tau <= %r} not in F_%r", index, index)
            raise StoppingTimeViolation(
                f"{{tau <= {index!r}}} = {sorted_outcomes(event)} is not measurable "
                f"in F_{index!r}"
            )

        self._table = MappingProxyType(table)
        self._filtration = filtration
        self._name = name

    @classmethod
    def try_construct(
        cls, function: OutcomeFunction, filtration: Filtration, name: Optional[str] = None
    ) -> Checked["StoppingTime"]:
        return attempt(cls, function, filtration, name=name)

    @classmethod
    def const(cls, filtration: Filtration, value: Any, name: Optional[str] = None) -> "StoppingTime":
        """Постоянный момент остановки (всегда валиден)."""
        return cls(lambda w: value, filtration, name=name or f"const({value!r})")

    @classmethod
    def hitting_time(
        cls,
        process: StochasticProcess,
        values: Iterable,
        filtration: Filtration,
        name: Optional[str] = None,
    ) -> "StoppingTime":
        """
        Первый индекс окна (по возрастанию), в котором X_i(ω) ∈ values; иначе TOP.

        Для адаптированного процесса результат всегда является моментом остановки.

        Raises:
            StoppingTimeViolation: Если процесс не адаптирован к фильтрации
        """
        targets = as_event(values)
        order = [i for i in filtration.ordered_indices() if i in process]

        table = {}
        for outcome in filtration.ambient.omega:
            table[outcome] = next(
                (i for i in order if process.at(i)(outcome) in targets), TOP
            )
        return cls(table, filtration, name=name or "hitting_time")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def filtration(self) -> Filtration:
        return self._filtration

    @property
    def table(self) -> Mapping:
        return self._table

    @property
    def identifier(self) -> str:
        return self._name or "stopping_time"

    def __call__(self, outcome: Any) -> Any:
        try:
            return self._table[outcome]
        except KeyError:
            raise KeyError(f"outcome {outcome!r} is not in the sample space") from None

    def is_bounded(self) -> bool:
        """τ останавливается на каждом исходе (не принимает TOP)."""
        return all(v is not TOP for v in self._table.values())

    def stopped_event(self, index: Hashable) -> frozenset:
        """{ω : τ(ω) ≤ i}."""
        return frozenset(
            w for w, v in self._table.items() if _stopped_by(v, index, self._filtration)
        )

    # -------------------------------------------------------------------------
    # Combinators
    # -------------------------------------------------------------------------

    def _pointwise(self, other: "StoppingTime", pick_lower: bool) -> dict:
        if other.filtration is not self._filtration:
            raise ValueError("stopping times must share the filtration")
        le = self._filtration.le
        table = {}
        for w, a in self._table.items():
            b = other.table[w]
            if a is TOP or b is TOP:
                finite = b if a is TOP else a
                table[w] = finite if pick_lower else TOP
                continue
            if le(a, b):
                table[w] = a if pick_lower else b
            elif le(b, a):
                table[w] = b if pick_lower else a
            else:
                raise ValueError(f"values {a!r} and {b!r} are not comparable")
        return table

    def min(self, other: "StoppingTime") -> "StoppingTime":
        """τ ∧ σ."""
        return StoppingTime(self._pointwise(other, pick_lower=True), self._filtration)

    def max(self, other: "StoppingTime") -> "StoppingTime":
        """τ ∨ σ."""
        return StoppingTime(self._pointwise(other, pick_lower=False), self._filtration)

    # -------------------------------------------------------------------------
    # Stopped quantities
    # -------------------------------------------------------------------------

    def stopped_value(self, process: StochasticProcess, name: Optional[str] = None) -> RandomVariable:
        """
        X_τ: ω ↦ X_{τ(ω)}(ω).

        Raises:
            ValueError: Если τ(ω) = TOP или индекс τ(ω) отсутствует в процессе
        """
        values = {}
        for w, index in self._table.items():
            if index is TOP:
                raise ValueError(f"stopped value is undefined at {w!r}: tau never stops")
            if index not in process:
                raise ValueError(f"process has no index {index!r}")
            values[w] = process.at(index)(w)
        return RandomVariable.real(values, process.source, name=name or "stopped_value")

    def stopped_process(self, process: StochasticProcess, name: Optional[str] = None) -> StochasticProcess:
        """
        Остановленный процесс Y_i(ω) = X_{min(i, τ(ω))}(ω).

        Raises:
            ValueError: Если τ(ω) ≤ i, но индекс τ(ω) отсутствует в процессе
        """
        variables = {}
        for i in process.indices:
            values = {}
            for w, tau in self._table.items():
                index = tau if _stopped_by(tau, i, self._filtration) else i
                if index not in process:
                    raise ValueError(f"process has no index {index!r}")
                values[w] = process.at(index)(w)
            variables[i] = RandomVariable.real(values, process.source, name=f"stopped[{i!r}]")
        return StochasticProcess(variables, name=name or "stopped_process")

    def __repr__(self) -> str:
        return f"StoppingTime({self.identifier})"
