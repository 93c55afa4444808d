"""
StochasticProcess — индексированное семейство случайных величин {X_i: Ω → E_i}

Все величины процесса определены на одной sigma-алгебре источника.
"""

from collections.abc import Hashable, Mapping
from typing import Any, Optional

from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import OutcomeFunction, SigmaAlgebra


class StochasticProcess:
    """Процесс {X_i}, индексированный конечным окном индексов."""

    __slots__ = ("_variables", "_name")

    def __init__(self, variables: Mapping[Hashable, RandomVariable], name: Optional[str] = None):
        """
        Raises:
            ValueError: Если процесс пуст или величины определены на разных алгебрах
        """
        if not variables:
            raise ValueError("a process requires at least one index")

        sources = {rv.source for rv in variables.values()}
        if len(sources) != 1:
            raise ValueError("all random variables of a process must share the source sigma-algebra")

        self._variables = dict(variables)
        self._name = name

    @classmethod
    def real(
        cls,
        functions: Mapping[Hashable, OutcomeFunction],
        source: SigmaAlgebra,
        name: Optional[str] = None,
    ) -> "StochasticProcess":
        """Действительнозначный процесс из функций ω ↦ X_i(ω)."""
        return cls(
            {i: RandomVariable.real(f, source, name=f"X[{i!r}]") for i, f in functions.items()},
            name=name,
        )

    @property
    def indices(self) -> tuple:
        return tuple(self._variables)

    @property
    def source(self) -> SigmaAlgebra:
        return next(iter(self._variables.values())).source

    @property
    def identifier(self) -> str:
        return self._name or f"process[{len(self._variables)} indices]"

    def at(self, index: Hashable) -> RandomVariable:
        """
        Raises:
            KeyError: Если индекс вне окна процесса
        """
        try:
            return self._variables[index]
        except KeyError:
            raise KeyError(f"index {index!r} is not in the process") from None

    def __getitem__(self, index: Hashable) -> RandomVariable:
        return self.at(index)

    def __contains__(self, index: object) -> bool:
        return index in self._variables

    def path(self, outcome: Any) -> dict:
        """Траектория i ↦ X_i(ω)."""
        return {i: rv(outcome) for i, rv in self._variables.items()}

    def __repr__(self) -> str:
        return f"StochasticProcess({self.identifier})"
