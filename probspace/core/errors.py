"""
Errors — иерархия исключений и результат smart-конструкторов

Все нарушения инвариантов при конструировании объектов приводят к немедленному
исключению (fail-fast): частично валидные объекты никогда не возвращаются.
Нарушения предусловий запросов (например, expectation для неинтегрируемой
пары) поднимаются в точке вызова с конкретным типом ошибки.

Для случаев, когда вызывающему коду удобнее результат, а не исключение,
каждый валидируемый тип имеет `try_*` конструктор, возвращающий Checked.
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ProbabilityCoreError(Exception):
    """Базовый класс всех ошибок probspace."""


class NotMeasurable(ProbabilityCoreError):
    """Множество или функция не удовлетворяет условию измеримости."""


class NotTotalToOne(ProbabilityCoreError):
    """
    Мера не удовлетворяет инварианту нормировки вероятностной меры.

    Поднимается как при wrap (μ(Ω) ≠ 1), так и при нарушении постусловия
    apply (значение вне [0, 1] или бесконечно).
    """


class InvalidSubalgebra(ProbabilityCoreError):
    """Sigma-алгебра не является под-алгеброй объемлющей алгебры."""


class NotIntegrable(ProbabilityCoreError):
    """Интеграл функции по мере не сходится абсолютно."""


class FiltrationViolation(ProbabilityCoreError):
    """Нарушена монотонность фильтрации или вложенность в объемлющую алгебру."""


class StoppingTimeViolation(ProbabilityCoreError):
    """Прообраз {j ≤ i} не измерим относительно F_i для некоторого индекса i."""


class SigmaAlgebraViolation(ProbabilityCoreError):
    """Явно заданное семейство множеств не является sigma-алгеброй."""


class MeasureViolation(ProbabilityCoreError):
    """Функция назначения меры нарушает μ(∅) = 0, неотрицательность или аддитивность."""


class TopologyViolation(ProbabilityCoreError):
    """Семейство открытых множеств не является топологией."""


# =============================================================================
# CHECKED RESULT
# =============================================================================


@dataclass(frozen=True)
class Checked(Generic[T]):
    """Результат smart-конструктора: либо значение, либо конкретная ошибка."""

    value: Optional[T]
    error: Optional[ProbabilityCoreError]

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str:
        """Тип и текст ошибки ("" при успехе)."""
        if self.error is None:
            return ""
        return f"{type(self.error).__name__}: {self.error}"

    def unwrap(self) -> T:
        """
        Извлечение значения.

        Raises:
            ProbabilityCoreError: сохранённая ошибка, если результат неуспешен
        """
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "Checked[T]":
        return cls(value=value, error=None)

    @classmethod
    def failure(cls, error: ProbabilityCoreError) -> "Checked[T]":
        return cls(value=None, error=error)


def attempt(factory: Callable[..., T], *args, **kwargs) -> Checked[T]:
    """
    Вызов конструктора с упаковкой доменной ошибки в Checked.

    Перехватываются только ProbabilityCoreError; ValueError/TypeError от
    некорректных аргументов пропагируют как есть.
    """
    try:
        return Checked.success(factory(*args, **kwargs))
    except ProbabilityCoreError as e:
        return Checked.failure(e)
