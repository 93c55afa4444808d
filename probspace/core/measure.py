"""
Measure — счётно-аддитивная мера на конечной sigma-алгебре

Мера назначает каждому измеримому множеству значение из [0, ∞].
На конечной sigma-алгебре мера однозначно задаётся массами атомов:
μ(S) = Σ μ(atom), atom ⊆ S.

Конструирование из произвольной функции назначения проверяется согласно
MeasureValidationConfig:
- μ(∅) = 0 и неотрицательность масс атомов — всегда
- Аддитивность на объединениях атомов — FULL (перебор) / SAMPLED / TRUSTED
Монотонность следует из аддитивности и неотрицательности атомов.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. μ(∅) = 0
2. μ(A ∪ B) = μ(A) + μ(B) для непересекающихся измеримых A, B
3. A ⊆ B ⇒ μ(A) ≤ μ(B)
4. Неизмеримое множество → NotMeasurable, значение никогда не угадывается
5. Pushforward пересчитывается при каждом вызове; равенство мер — по значению
"""

import itertools
import logging
import random
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Callable, Optional

from probspace.core.config import MeasureValidationConfig, ToleranceConfig, ValidationMode
from probspace.core.domain.descriptions import AtomMass, MeasureDescription
from probspace.core.errors import MeasureViolation, NotMeasurable
from probspace.core.math.numerical_safeguards import (
    MeasureValue,
    ext_add,
    ext_mul,
    ext_sum,
    format_value,
    is_infinite,
    is_real_number,
    is_zero,
    validate_ennreal,
)
from probspace.core.random_variable import RandomVariable
from probspace.core.sigma_algebra import (
    OutcomeFunction,
    SigmaAlgebra,
    as_event,
    outcome_key,
    sorted_outcomes,
    tabulate,
)

logger = logging.getLogger(__name__)


def _validated_mass(value: Any, label: str) -> MeasureValue:
    try:
        return validate_ennreal(value, label)
    except (TypeError, ValueError) as e:
        raise MeasureViolation(str(e)) from e


def _candidate_unions(atom_count: int, config: MeasureValidationConfig):
    """Наборы индексов атомов (размер ≥ 2), на которых проверяется аддитивность."""
    if config.mode == ValidationMode.FULL and atom_count <= config.max_exhaustive_atoms:
        for r in range(2, atom_count + 1):
            yield from itertools.combinations(range(atom_count), r)
        return

    rng = random.Random(config.seed)
    for _ in range(config.sample_size):
        indices = tuple(i for i in range(atom_count) if rng.random() < 0.5)
        if len(indices) >= 2:
            yield indices


class Measure:
    """
    Мера на SigmaAlgebra.

    Явный API (мера передаётся параметром) — общая композиционная форма.
    Для одной выделенной меры на пространстве см. CanonicalMeasureSpace.
    """

    __slots__ = ("_sigma_algebra", "_masses", "_name", "_tolerance")

    _is_probability = False

    def __init__(
        self,
        sigma_algebra: SigmaAlgebra,
        assign: Callable[[frozenset], MeasureValue],
        config: Optional[MeasureValidationConfig] = None,
        name: Optional[str] = None,
    ):
        """
        Args:
            sigma_algebra: sigma-алгебра, на которой определена мера
            assign: функция измеримое множество → [0, ∞]
            config: стратегия проверки (default: FULL)
            name: идентификатор (опционально)

        Raises:
            MeasureViolation: Если μ(∅) ≠ 0, масса атома невалидна или
                нарушена аддитивность на проверяемых объединениях
        """
        config = config or MeasureValidationConfig()

        empty_value = _validated_mass(assign(frozenset()), "measure of the empty set")
        if not is_zero(empty_value, config.tolerance.abs_tol):
            raise MeasureViolation(f"measure of the empty set must be 0, got {empty_value}")

        atoms = sigma_algebra.atoms
        masses = {
            atom: _validated_mass(assign(atom), f"mass of atom {sorted_outcomes(atom)}")
            for atom in atoms
        }

        if config.mode != ValidationMode.TRUSTED:
            for indices in _candidate_unions(len(atoms), config):
                union = frozenset().union(*(atoms[i] for i in indices))
                expected = ext_sum(masses[atoms[i]] for i in indices)
                actual = _validated_mass(assign(union), f"measure of {sorted_outcomes(union)}")
                if not config.tolerance.close(actual, expected):
                    logger.warning(
                        "Rejected non-additive assignment on %s: %s != %s",
                        sorted_outcomes(union),
                        actual,
                        expected,
                    )
                    raise MeasureViolation(
                        f"assignment is not additive on {sorted_outcomes(union)}: "
                        f"got {actual}, sum over atoms is {expected}"
                    )

        self._init_state(sigma_algebra, masses, name, config.tolerance)
        logger.debug("Constructed measure %s (mode=%s)", self.identifier, config.mode.value)

    def _init_state(
        self,
        sigma_algebra: SigmaAlgebra,
        masses: Mapping,
        name: Optional[str],
        tolerance: ToleranceConfig,
    ) -> None:
        self._sigma_algebra = sigma_algebra
        self._masses = MappingProxyType(dict(masses))
        self._name = name
        self._tolerance = tolerance

    @classmethod
    def _from_masses(
        cls,
        sigma_algebra: SigmaAlgebra,
        masses: Mapping,
        name: Optional[str] = None,
        tolerance: Optional[ToleranceConfig] = None,
    ) -> "Measure":
        """Мера из уже провалидированных масс атомов (аддитивна по построению)."""
        measure = Measure.__new__(Measure)
        measure._init_state(sigma_algebra, masses, name, tolerance or ToleranceConfig())
        return measure

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_atom_masses(
        cls,
        sigma_algebra: SigmaAlgebra,
        masses: Mapping,
        name: Optional[str] = None,
        tolerance: Optional[ToleranceConfig] = None,
    ) -> "Measure":
        """
        Мера по массам атомов. Атомы, отсутствующие в masses, имеют массу 0.

        Raises:
            MeasureViolation: Если ключ не является атомом или масса невалидна
        """
        atom_masses = {atom: 0 for atom in sigma_algebra.atoms}
        for key, value in masses.items():
            atom = as_event(key)
            if atom not in atom_masses:
                raise MeasureViolation(
                    f"{sorted_outcomes(atom)} is not an atom of {sigma_algebra.identifier}"
                )
            atom_masses[atom] = _validated_mass(value, f"mass of atom {sorted_outcomes(atom)}")
        return cls._from_masses(sigma_algebra, atom_masses, name, tolerance)

    @classmethod
    def from_point_masses(
        cls,
        sigma_algebra: SigmaAlgebra,
        masses: Mapping,
        name: Optional[str] = None,
        tolerance: Optional[ToleranceConfig] = None,
    ) -> "Measure":
        """
        Мера по массам отдельных исходов; масса атома — сумма масс его исходов.

        Raises:
            MeasureViolation: Если исход вне Ω или масса невалидна
        """
        for outcome in masses:
            if outcome not in sigma_algebra.omega:
                raise MeasureViolation(f"outcome {outcome!r} is outside the sample space")

        atom_masses = {
            atom: ext_sum(
                _validated_mass(masses.get(outcome, 0), f"mass of outcome {outcome!r}")
                for outcome in atom
            )
            for atom in sigma_algebra.atoms
        }
        return cls._from_masses(sigma_algebra, atom_masses, name, tolerance)

    @classmethod
    def dirac(cls, sigma_algebra: SigmaAlgebra, point: Any, name: Optional[str] = None) -> "Measure":
        """Мера Дирака δ_point."""
        atom = sigma_algebra.atom_of(point)
        return cls._from_masses(
            sigma_algebra,
            {a: (1 if a == atom else 0) for a in sigma_algebra.atoms},
            name or f"dirac({point!r})",
        )

    @classmethod
    def counting(cls, sigma_algebra: SigmaAlgebra, name: Optional[str] = None) -> "Measure":
        """Считающая мера: μ(S) = |S|."""
        return cls._from_masses(
            sigma_algebra, {a: len(a) for a in sigma_algebra.atoms}, name or "count"
        )

    @classmethod
    def zero(cls, sigma_algebra: SigmaAlgebra, name: Optional[str] = None) -> "Measure":
        return cls._from_masses(sigma_algebra, {a: 0 for a in sigma_algebra.atoms}, name or "0")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def sigma_algebra(self) -> SigmaAlgebra:
        return self._sigma_algebra

    @property
    def masses(self) -> Mapping:
        """Массы атомов (read-only)."""
        return self._masses

    @property
    def tolerance(self) -> ToleranceConfig:
        return self._tolerance

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def identifier(self) -> str:
        return self._name or f"measure[{self._sigma_algebra.identifier}]"

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def apply(self, subset: Iterable) -> MeasureValue:
        """
        Значение меры на измеримом множестве.

        Raises:
            NotMeasurable: Если множество не измеримо
        """
        atoms = self._sigma_algebra.atoms_within(subset)
        return ext_sum(self._masses[atom] for atom in atoms)

    def __call__(self, subset: Iterable) -> MeasureValue:
        return self.apply(subset)

    def total_mass(self) -> MeasureValue:
        return ext_sum(self._masses.values())

    def is_finite(self) -> bool:
        return not is_infinite(self.total_mass())

    def is_null(self, subset: Iterable) -> bool:
        return is_zero(self.apply(subset), self._tolerance.abs_tol)

    def outer_null(self, subset: Iterable) -> bool:
        """Множество (возможно неизмеримое) содержится в измеримом множестве меры 0."""
        atoms = self._sigma_algebra.atoms_meeting(subset)
        return is_zero(ext_sum(self._masses[a] for a in atoms), self._tolerance.abs_tol)

    def _values_close(self, a: Any, b: Any) -> bool:
        if is_real_number(a) and is_real_number(b):
            return self._tolerance.close(a, b)
        return a == b

    def ae_equal(self, f: OutcomeFunction, g: OutcomeFunction) -> bool:
        """f = g μ-почти всюду."""
        omega = self._sigma_algebra.omega
        f_table = tabulate(f, omega)
        g_table = tabulate(g, omega)
        differ = {w for w in omega if not self._values_close(f_table[w], g_table[w])}
        return self.outer_null(differ)

    def ae_le(self, f: OutcomeFunction, g: OutcomeFunction) -> bool:
        """f ≤ g μ-почти всюду (для действительнозначных функций)."""
        omega = self._sigma_algebra.omega
        f_table = tabulate(f, omega)
        g_table = tabulate(g, omega)
        violated = {
            w
            for w in omega
            if f_table[w] > g_table[w] and not self._values_close(f_table[w], g_table[w])
        }
        return self.outer_null(violated)

    # -------------------------------------------------------------------------
    # Derived measures
    # -------------------------------------------------------------------------

    def pushforward(self, random_variable: RandomVariable) -> "Measure":
        """
        Образ меры (закон) при случайной величине: ν(B) = μ(X⁻¹(B)).

        Пересчитывается при каждом вызове, не кэшируется.

        Raises:
            NotMeasurable: Если X определена на другом Ω или её прообразы
                не измеримы относительно sigma-алгебры этой меры
        """
        if not isinstance(random_variable, RandomVariable):
            raise TypeError(
                f"pushforward requires a RandomVariable, got {type(random_variable).__name__}"
            )
        if not random_variable.is_measurable_wrt(self._sigma_algebra):
            raise NotMeasurable(
                f"{random_variable.identifier} is not measurable with respect to "
                f"{self._sigma_algebra.identifier}"
            )

        target = random_variable.target
        masses = {atom: self.apply(random_variable.preimage(atom)) for atom in target.atoms}
        return Measure._from_masses(
            target,
            masses,
            name=f"{self.identifier}.map({random_variable.identifier})",
            tolerance=self._tolerance,
        )

    def restrict(self, subset: Iterable) -> "Measure":
        """Сужение μ|_S(A) = μ(A ∩ S)."""
        s = self._sigma_algebra.require_measurable(subset)
        masses = {atom: (m if atom <= s else 0) for atom, m in self._masses.items()}
        return Measure._from_masses(
            self._sigma_algebra, masses, name=f"{self.identifier}|S", tolerance=self._tolerance
        )

    def scale(self, factor: MeasureValue) -> "Measure":
        """c · μ для c ∈ [0, ∞]."""
        factor = validate_ennreal(factor, "factor")
        masses = {atom: ext_mul(factor, m) for atom, m in self._masses.items()}
        return Measure._from_masses(
            self._sigma_algebra,
            masses,
            name=f"{format_value(factor)}*{self.identifier}",
            tolerance=self._tolerance,
        )

    def __add__(self, other: "Measure") -> "Measure":
        if not isinstance(other, Measure):
            return NotImplemented
        if other.sigma_algebra != self._sigma_algebra:
            raise ValueError("measures on different sigma-algebras cannot be added")
        masses = {atom: ext_add(m, other.masses[atom]) for atom, m in self._masses.items()}
        return Measure._from_masses(
            self._sigma_algebra,
            masses,
            name=f"({self.identifier} + {other.identifier})",
            tolerance=self._tolerance,
        )

    # -------------------------------------------------------------------------
    # Value semantics
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Measure):
            return NotImplemented
        if self._sigma_algebra != other.sigma_algebra:
            return False
        return all(
            self._tolerance.close(m, other.masses[atom]) for atom, m in self._masses.items()
        )

    def __hash__(self) -> int:
        return hash(self._sigma_algebra)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identifier})"

    def describe(self) -> MeasureDescription:
        atom_masses = sorted(
            (
                AtomMass(atom=sorted(outcome_key(o) for o in atom), mass=format_value(m))
                for atom, m in self._masses.items()
            ),
            key=lambda item: item.atom,
        )
        return MeasureDescription(
            identifier=self.identifier,
            sigma_algebra=self._sigma_algebra.describe(),
            total_mass=format_value(self.total_mass()),
            is_finite=self.is_finite(),
            is_probability=self._is_probability,
            atom_masses=atom_masses,
        )
