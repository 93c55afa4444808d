"""
Filtration — монотонное семейство под-sigma-алгебр {F_i}

Индексы упорядочены порядком, заданным вызывающим кодом (le), который может
быть частичным. Проверяется конечное окно индексов, переданное при
конструировании: для неограниченных множеств индексов (например, ℕ)
проверка ограничена этим окном.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ (проверяются один раз при конструировании):
1. F_i ⊆ ambient для каждого i
2. i ≤ j ⇒ F_i ⊆ F_j
После конструирования фильтрация immutable: только запросы at(i).
"""

import functools
import itertools
import logging
import operator
from collections.abc import Hashable, Iterable, Mapping
from typing import Callable, Optional

from probspace.core.domain.descriptions import FiltrationDescription
from probspace.core.errors import FiltrationViolation
from probspace.core.sigma_algebra import SigmaAlgebra, outcome_key, sorted_outcomes
from probspace.process.stochastic_process import StochasticProcess

logger = logging.getLogger(__name__)

IndexOrder = Callable[[Hashable, Hashable], bool]


class Filtration:
    """Фильтрация на ambient sigma-алгебре, проверенная на окне индексов."""

    __slots__ = ("_ambient", "_algebras", "_le", "_name")

    def __init__(
        self,
        ambient: SigmaAlgebra,
        algebras: Mapping[Hashable, SigmaAlgebra],
        le: IndexOrder = operator.le,
        name: Optional[str] = None,
    ):
        """
        Args:
            ambient: объемлющая sigma-алгебра
            algebras: окно индексов i ↦ F_i
            le: порядок на индексах (default: operator.le)
            name: идентификатор (опционально)

        Raises:
            FiltrationViolation: Если окно пусто, F_i ⊄ ambient или нарушена монотонность
        """
        if not algebras:
            raise FiltrationViolation("a filtration requires at least one index")

        for index, algebra in algebras.items():
            if not algebra.is_sub_algebra_of(ambient):
                logger.warning("Rejected filtration: F_%r is not inside the ambient algebra", index)
                raise FiltrationViolation(
                    f"F_{index!r} is not a sub-sigma-algebra of {ambient.identifier}"
                )

        for i, j in itertools.permutations(algebras, 2):
            if not le(i, j):
                continue
            earlier, later = algebras[i], algebras[j]
            missing = next((a for a in earlier.atoms if not later.is_measurable(a)), None)
            if missing is not None:
                logger.warning("Rejected filtration: F_%r is not contained in F_%r", i, j)
                raise FiltrationViolation(
                    f"monotonicity violated: set {sorted_outcomes(missing)} is measurable "
                    f"at index {i!r} but not at index {j!r}"
                )

        self._ambient = ambient
        self._algebras = dict(algebras)
        self._le = le
        self._name = name
        logger.debug("Constructed filtration over %d indices", len(self._algebras))

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def natural(
        cls,
        process: StochasticProcess,
        le: IndexOrder = operator.le,
        ambient: Optional[SigmaAlgebra] = None,
        name: Optional[str] = None,
    ) -> "Filtration":
        """
        Естественная фильтрация процесса: F_i = σ(X_j : j ≤ i).
        """
        ambient = ambient or process.source
        omega = process.source.omega
        generated = {i: process.at(i).generated_sigma_algebra() for i in process.indices}

        algebras = {}
        for i in process.indices:
            algebra = SigmaAlgebra.trivial(omega)
            for j, sigma_j in generated.items():
                if le(j, i):
                    algebra = algebra.join(sigma_j)
            algebras[i] = algebra

        return cls(ambient, algebras, le=le, name=name or f"natural({process.identifier})")

    @classmethod
    def constant(
        cls,
        ambient: SigmaAlgebra,
        indices: Iterable[Hashable],
        algebra: Optional[SigmaAlgebra] = None,
        le: IndexOrder = operator.le,
        name: Optional[str] = None,
    ) -> "Filtration":
        """Постоянная фильтрация F_i = algebra (default: ambient)."""
        algebra = algebra or ambient
        return cls(ambient, {i: algebra for i in indices}, le=le, name=name)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def ambient(self) -> SigmaAlgebra:
        return self._ambient

    @property
    def le(self) -> IndexOrder:
        return self._le

    @property
    def indices(self) -> tuple:
        return tuple(self._algebras)

    @property
    def identifier(self) -> str:
        return self._name or f"filtration[{len(self._algebras)} indices]"

    def ordered_indices(self) -> list:
        """Индексы окна по возрастанию (для полного порядка)."""

        def compare(a, b) -> int:
            if a == b:
                return 0
            return -1 if self._le(a, b) else 1

        return sorted(self._algebras, key=functools.cmp_to_key(compare))

    def at(self, index: Hashable) -> SigmaAlgebra:
        """
        Raises:
            KeyError: Если индекс вне проверенного окна
        """
        try:
            return self._algebras[index]
        except KeyError:
            raise KeyError(f"index {index!r} is outside the filtration window") from None

    def __contains__(self, index: object) -> bool:
        return index in self._algebras

    def __repr__(self) -> str:
        return f"Filtration({self.identifier})"

    def describe(self) -> FiltrationDescription:
        return FiltrationDescription(
            identifier=self.identifier,
            ambient=self._ambient.identifier,
            indices=[outcome_key(i) for i in self._algebras],
            atom_counts=[len(a.atoms) for a in self._algebras.values()],
        )
