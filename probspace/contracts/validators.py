"""
JSON Schema контракты описаний probspace

Каждая модель описания (probspace.core.domain.descriptions) объявляет имя
своего контракта в атрибуте класса `contract`. Контракт проверяется при
конструировании модели, поэтому любой describe() отдаёт только описания,
совместимые со схемой.

Контракт фиксирует внешний формат сверх полей pydantic:
- массы мер как строки ("inf", "1/4", "0.5"), без знака и NaN
- уникальность значений образа случайной величины
- непустое окно индексов фильтрации
- отсутствие лишних полей

Схемы (probspace/contracts/schema/):
- sigma_algebra_description.json
- measure_description.json
- random_variable_description.json
- filtration_description.json
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping

import jsonschema
from jsonschema import Draft202012Validator
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMAS
# =============================================================================


@lru_cache(maxsize=None)
def contract_validator(contract: str) -> Draft202012Validator:
    """
    Валидатор контракта по имени схемы.

    Схема читается и проходит meta-validation один раз на процесс.

    Raises:
        FileNotFoundError: Если схемы с таким именем нет
        ValueError: Если файл не является валидной JSON Schema
    """
    path = SCHEMA_DIR / f"{contract}.json"
    if not path.exists():
        raise FileNotFoundError(f"Unknown contract {contract!r}: {path} not found")

    with open(path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    try:
        Draft202012Validator.check_schema(schema)
    except jsonschema.SchemaError as e:
        raise ValueError(f"Invalid JSON Schema in {contract}.json: {e.message}") from e

    logger.debug("Loaded contract %s", contract)
    return Draft202012Validator(schema)


def available_contracts() -> List[str]:
    return sorted(path.stem for path in SCHEMA_DIR.glob("*.json"))


# =============================================================================
# VALIDATION
# =============================================================================


def _error_path(error: jsonschema.ValidationError) -> str:
    return "/".join(str(part) for part in error.absolute_path) or "<root>"


def contract_errors(contract: str, payload: Mapping[str, Any]) -> List[str]:
    """Все нарушения контракта как "путь: сообщение", упорядоченные по пути."""
    errors = sorted(contract_validator(contract).iter_errors(payload), key=_error_path)
    return [f"{_error_path(e)}: {e.message}" for e in errors]


def validate_payload(contract: str, payload: Mapping[str, Any]) -> None:
    """
    Проверка внешнего payload (например, прочитанного из JSON).

    Raises:
        jsonschema.ValidationError: Первое найденное нарушение контракта
    """
    contract_validator(contract).validate(payload)


def contract_of(description: BaseModel) -> str:
    """
    Имя контракта модели описания.

    Raises:
        TypeError: Если модель не объявляет контракт
    """
    contract = getattr(type(description), "contract", None)
    if not isinstance(contract, str):
        raise TypeError(f"{type(description).__name__} does not declare a JSON contract")
    return contract


def validate_description(description: BaseModel) -> Dict[str, Any]:
    """
    Проверка описания против контракта, выбранного по типу модели.

    Returns:
        JSON-совместимый payload описания

    Raises:
        TypeError: Если модель не объявляет контракт
        jsonschema.ValidationError: Если payload нарушает контракт
    """
    payload = description.model_dump(mode="json")
    validate_payload(contract_of(description), payload)
    return payload
