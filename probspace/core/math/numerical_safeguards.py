"""
Numerical Safeguards — Extended Non-negative Reals & Tolerant Comparison

Модуль обеспечивает корректную арифметику значений мер:
- Домен значений: [0, ∞] (int, Fraction — точный домен; float — плавающий)
- ∞ представляется как math.inf
- Соглашение 0 · ∞ = 0 (как в теории меры)
- Сравнения float с учётом машинной точности, точные сравнения для рациональных

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. NaN и -∞ никогда не становятся значением меры (ValueError)
2. Для int/Fraction сравнение всегда точное, толерантность не применяется
3. Значения никогда не клампятся молча: невалидный вход → исключение
4. Все операции детерминированы и воспроизводимы
"""

import math
from fractions import Fraction
from numbers import Real
from typing import Final, Iterable, Union

MeasureValue = Union[int, float, Fraction]

# =============================================================================
# EPSILON-ПАРАМЕТРЫ
# =============================================================================

# Относительная толерантность для сравнения float
EPS_FLOAT_COMPARE_REL: Final[float] = 1e-9

# Абсолютная толерантность для сравнения float
EPS_FLOAT_COMPARE_ABS: Final[float] = 1e-12

INF: Final[float] = math.inf


# =============================================================================
# КЛАССИФИКАЦИЯ ЗНАЧЕНИЙ
# =============================================================================


def is_exact(value: object) -> bool:
    """
    Проверка, относится ли значение к точному (рациональному) домену.

    bool исключён, хотя формально является подклассом int.
    """
    return isinstance(value, (int, Fraction)) and not isinstance(value, bool)


def is_real_number(value: object) -> bool:
    """Проверка, является ли значение действительным числом (не bool)."""
    return isinstance(value, Real) and not isinstance(value, bool)


def is_valid_float(value: float) -> bool:
    """
    Проверка, является ли значение конечным (не NaN, не Inf).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение finite
    """
    return math.isfinite(value)


def is_infinite(value: MeasureValue) -> bool:
    """Проверка, равно ли значение +∞."""
    return isinstance(value, float) and value == INF


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_ennreal(value: object, name: str) -> MeasureValue:
    """
    Валидация значения из [0, ∞].

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        value без изменений

    Raises:
        TypeError: Если value не действительное число
        ValueError: Если value NaN, отрицательно или -∞
    """
    if not is_real_number(value):
        raise TypeError(f"{name} must be a real number, got {type(value).__name__}")

    if isinstance(value, float) and math.isnan(value):
        raise ValueError(f"{name} must not be NaN")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")

    return value


def validate_non_negative(value: float, name: str) -> None:
    """
    Валидация, что значение конечное и неотрицательное.

    Raises:
        ValueError: Если value < 0 или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_in_range(
    value: float,
    name: str,
    min_value: float | None = None,
    max_value: float | None = None,
) -> None:
    """
    Валидация, что значение в заданном диапазоне.

    Raises:
        ValueError: Если value вне диапазона или NaN/Inf
    """
    if not is_valid_float(value):
        raise ValueError(f"{name} must be a valid float (not NaN/Inf), got {value}")

    if min_value is not None and value < min_value:
        raise ValueError(f"{name} must be >= {min_value}, got {value}")

    if max_value is not None and value > max_value:
        raise ValueError(f"{name} must be <= {max_value}, got {value}")


# =============================================================================
# АРИФМЕТИКА [0, ∞]
# =============================================================================


def ext_add(a: MeasureValue, b: MeasureValue) -> MeasureValue:
    """Сложение в [0, ∞]: x + ∞ = ∞."""
    if is_infinite(a) or is_infinite(b):
        return INF
    return a + b


def ext_sum(values: Iterable[MeasureValue]) -> MeasureValue:
    """
    Сумма в [0, ∞]. Пустая сумма равна точному 0.

    Examples:
        >>> ext_sum([Fraction(1, 4), Fraction(3, 4)])
        Fraction(1, 1)
        >>> ext_sum([1.0, math.inf])
        inf
    """
    total: MeasureValue = 0
    for v in values:
        total = ext_add(total, v)
    return total


def ext_mul(a: MeasureValue, b: MeasureValue) -> MeasureValue:
    """
    Умножение в [0, ∞] с соглашением 0 · ∞ = 0.

    Examples:
        >>> ext_mul(0, math.inf)
        0
        >>> ext_mul(2, math.inf)
        inf
    """
    if a == 0 or b == 0:
        return 0
    if is_infinite(a) or is_infinite(b):
        return INF
    return a * b


def ext_prod(values: Iterable[MeasureValue]) -> MeasureValue:
    """Произведение в [0, ∞]. Пустое произведение равно точной 1."""
    result: MeasureValue = 1
    for v in values:
        result = ext_mul(result, v)
    return result


def reciprocal(value: MeasureValue) -> MeasureValue:
    """
    Обратное значение для конечного положительного value.

    Для int результат точный (Fraction).

    Raises:
        ValueError: Если value равно 0 или ∞
    """
    if value == 0 or is_infinite(value):
        raise ValueError(f"reciprocal requires a finite positive value, got {value}")
    if isinstance(value, int):
        return Fraction(1, value)
    return 1 / value


# =============================================================================
# EPSILON-СРАВНЕНИЯ
# =============================================================================


def is_close(
    a: MeasureValue,
    b: MeasureValue,
    rel_tol: float = EPS_FLOAT_COMPARE_REL,
    abs_tol: float = EPS_FLOAT_COMPARE_ABS,
) -> bool:
    """
    Сравнение значений с учётом домена.

    - Оба значения точные (int/Fraction): строгое равенство
    - Хотя бы одно бесконечно: строгое равенство
    - Иначе: math.isclose с заданными толерантностями

    Examples:
        >>> is_close(Fraction(999999, 1000000), 1)
        False
        >>> is_close(0.1 + 0.2, 0.3)
        True
        >>> is_close(0.999999, 1.0)
        False
    """
    if is_exact(a) and is_exact(b):
        return a == b
    if is_infinite(a) or is_infinite(b):
        return a == b
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def is_zero(value: MeasureValue, tol: float = EPS_FLOAT_COMPARE_ABS) -> bool:
    """
    Проверка, равно ли значение нулю (точно для рациональных, с tol для float).
    """
    if is_exact(value):
        return value == 0
    return abs(value) <= tol


def format_value(value: MeasureValue) -> str:
    """Строковое представление значения для описаний ("inf" для ∞)."""
    if is_infinite(value):
        return "inf"
    if isinstance(value, float) and value == 0:
        return "0.0"
    return str(value)
