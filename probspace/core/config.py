"""
Config — параметры валидации и сравнения

Все конфигурации immutable (frozen dataclass) и передаются в конструкторы
явно; при отсутствии используется конфигурация по умолчанию.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from probspace.core.math.numerical_safeguards import (
    EPS_FLOAT_COMPARE_ABS,
    EPS_FLOAT_COMPARE_REL,
    MeasureValue,
    is_close,
    validate_in_range,
    validate_non_negative,
)

# =============================================================================
# CONSTANTS
# =============================================================================

# Порог числа атомов, до которого FULL валидация перебирает все объединения
MAX_EXHAUSTIVE_ATOMS_DEFAULT: Final[int] = 12

# Размер выборки объединений атомов для SAMPLED валидации
SAMPLE_SIZE_DEFAULT: Final[int] = 256


class ValidationMode(str, Enum):
    """
    Стратегия проверки аддитивности функции назначения меры.

    FULL: перебор всех объединений атомов (выборка выше порога атомов)
    SAMPLED: проверка на случайной выборке объединений (debug-режим)
    TRUSTED: функция принимается без проверки аддитивности (release-режим)
    """

    FULL = "FULL"
    SAMPLED = "SAMPLED"
    TRUSTED = "TRUSTED"


@dataclass(frozen=True)
class ToleranceConfig:
    """Толерантности для сравнения float значений мер.

    Для int/Fraction сравнение всегда точное.
    """

    rel_tol: float = EPS_FLOAT_COMPARE_REL
    abs_tol: float = EPS_FLOAT_COMPARE_ABS

    def __post_init__(self) -> None:
        validate_in_range(self.rel_tol, "rel_tol", min_value=0.0, max_value=1.0)
        validate_non_negative(self.abs_tol, "abs_tol")

    def close(self, a: MeasureValue, b: MeasureValue) -> bool:
        return is_close(a, b, rel_tol=self.rel_tol, abs_tol=self.abs_tol)


@dataclass(frozen=True)
class MeasureValidationConfig:
    """Конфигурация проверки функции назначения меры.

    μ(∅) = 0 и неотрицательность атомов проверяются всегда, независимо от mode.
    """

    mode: ValidationMode = ValidationMode.FULL
    max_exhaustive_atoms: int = MAX_EXHAUSTIVE_ATOMS_DEFAULT
    sample_size: int = SAMPLE_SIZE_DEFAULT
    seed: int = 0
    tolerance: ToleranceConfig = field(default_factory=ToleranceConfig)

    def __post_init__(self) -> None:
        validate_in_range(self.max_exhaustive_atoms, "max_exhaustive_atoms", min_value=0)
        validate_in_range(self.sample_size, "sample_size", min_value=1)
