"""
Descriptions — человекочитаемые описания объектов probspace

Immutable Pydantic модели, которые core отдаёт слою представления.
Каждая модель верхнего уровня объявляет свой JSON Schema контракт
(probspace/contracts/schema/*.json) и проверяет его при конструировании.
Формат сериализации, кроме этих описаний, не определяется.

Значения мер передаются строками ("inf" для ∞, "1/4" для Fraction),
чтобы точный домен не терял точность при JSON сериализации.
"""

from typing import ClassVar

from pydantic import BaseModel, Field, model_validator

from probspace.contracts.validators import contract_errors


class ContractDescription(BaseModel):
    """Описание с JSON Schema контрактом, проверяемым после валидации полей."""

    contract: ClassVar[str]

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_contract(self) -> "ContractDescription":
        errors = contract_errors(self.contract, self.model_dump(mode="json"))
        if errors:
            raise ValueError(f"{self.contract} contract violated: " + "; ".join(errors))
        return self


class SigmaAlgebraDescription(ContractDescription):
    """Описание sigma-алгебры через её атомы."""

    contract: ClassVar[str] = "sigma_algebra_description"

    identifier: str = Field(..., min_length=1, description="Строковый идентификатор")
    outcome_count: int = Field(..., ge=0, description="Размер пространства исходов")
    atom_count: int = Field(..., ge=0, description="Число атомов")
    is_discrete: bool = Field(..., description="Все подмножества измеримы")
    atoms: list[list[str]] = Field(..., description="Атомы (исходы как repr)")

    model_config = {"frozen": True}


class AtomMass(BaseModel):
    """Масса одного атома."""

    atom: list[str] = Field(..., description="Исходы атома (repr)")
    mass: str = Field(..., min_length=1, description="Значение меры атома")

    model_config = {"frozen": True}


class MeasureDescription(ContractDescription):
    """Описание меры."""

    contract: ClassVar[str] = "measure_description"

    identifier: str = Field(..., min_length=1, description="Строковый идентификатор")
    sigma_algebra: SigmaAlgebraDescription = Field(..., description="Базовая sigma-алгебра")
    total_mass: str = Field(..., min_length=1, description="μ(Ω)")
    is_finite: bool = Field(..., description="μ(Ω) < ∞")
    is_probability: bool = Field(..., description="Мера обёрнута как вероятностная")
    atom_masses: list[AtomMass] = Field(..., description="Массы атомов")

    model_config = {"frozen": True}


class RandomVariableDescription(ContractDescription):
    """Описание случайной величины."""

    contract: ClassVar[str] = "random_variable_description"

    identifier: str = Field(..., min_length=1, description="Строковый идентификатор")
    source: str = Field(..., min_length=1, description="Идентификатор sigma-алгебры Ω")
    target: str = Field(..., min_length=1, description="Идентификатор sigma-алгебры E")
    image: list[str] = Field(..., description="Образ (значения как repr)")

    model_config = {"frozen": True}


class FiltrationDescription(ContractDescription):
    """Описание фильтрации."""

    contract: ClassVar[str] = "filtration_description"

    identifier: str = Field(..., min_length=1, description="Строковый идентификатор")
    ambient: str = Field(..., min_length=1, description="Идентификатор объемлющей алгебры")
    indices: list[str] = Field(..., description="Окно индексов (repr)")
    atom_counts: list[int] = Field(..., description="Число атомов F_i по индексам")

    model_config = {"frozen": True}
