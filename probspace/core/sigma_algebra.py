"""
SigmaAlgebra — измеримая структура на конечном пространстве исходов

Sigma-алгебра на конечном Ω однозначно задаётся своими атомами: разбиением Ω
на минимальные непустые измеримые множества. Множество измеримо тогда и
только тогда, когда оно является объединением атомов.

Конструкторы:
- discrete(Ω): все подмножества измеримы (атомы — синглтоны)
- trivial(Ω): измеримы только ∅ и Ω
- generated_by(Ω, family): наименьшая sigma-алгебра, содержащая family
- borel(topology): порождена открытыми множествами топологии
- from_sets(Ω, sets): явное семейство, проверяемое на аксиомы
- comap(Ω, f, target): sigma-алгебра, порождённая функцией

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. ∅ и Ω измеримы
2. Замкнутость относительно дополнения и (счётного) объединения
3. Объект immutable после конструирования
4. Равенство по значению: то же Ω и то же множество атомов
"""

import itertools
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Callable, Hashable, Optional, Union

from probspace.core.domain.descriptions import SigmaAlgebraDescription
from probspace.core.errors import NotMeasurable, SigmaAlgebraViolation, TopologyViolation

logger = logging.getLogger(__name__)

Outcome = Hashable
Event = frozenset
OutcomeFunction = Union[Callable[[Any], Any], Mapping]


# =============================================================================
# HELPERS
# =============================================================================


def as_event(subset: Iterable) -> frozenset:
    """
    Приведение подмножества к frozenset.

    Raises:
        TypeError: Если subset не итерируемый набор исходов (str/bytes отвергаются)
    """
    if isinstance(subset, frozenset):
        return subset
    if isinstance(subset, (str, bytes)) or not isinstance(subset, Iterable):
        raise TypeError(f"event must be an iterable of outcomes, got {type(subset).__name__}")
    return frozenset(subset)


def outcome_key(outcome: Any) -> str:
    """Ключ детерминированной сортировки исходов разных типов."""
    return repr(outcome)


def sorted_outcomes(outcomes: Iterable) -> list:
    return sorted(outcomes, key=outcome_key)


def tabulate(function: OutcomeFunction, omega: frozenset) -> dict:
    """
    Табуляция функции на конечном Ω.

    Args:
        function: callable или Mapping исход → значение
        omega: пространство исходов

    Returns:
        dict ω → f(ω)

    Raises:
        NotMeasurable: Если Mapping не определён на некотором ω (функция не тотальна)
        TypeError: Если function не callable и не Mapping
    """
    if isinstance(function, Mapping):
        for outcome in sorted_outcomes(omega):
            if outcome not in function:
                raise NotMeasurable(f"function is not total: no value for outcome {outcome!r}")
        return {outcome: function[outcome] for outcome in omega}

    if not callable(function):
        raise TypeError(f"function must be callable or a mapping, got {type(function).__name__}")

    return {outcome: function(outcome) for outcome in omega}


# =============================================================================
# SIGMA ALGEBRA
# =============================================================================


class SigmaAlgebra:
    """
    Sigma-алгебра на конечном пространстве исходов, заданная атомами.

    Используйте именованные конструкторы; прямой вызов принимает разбиение
    Ω на атомы и проверяет, что это действительно разбиение.
    """

    __slots__ = ("_omega", "_atoms", "_atom_of", "_name")

    def __init__(self, omega: Iterable, atoms: Iterable[Iterable], name: Optional[str] = None):
        """
        Args:
            omega: пространство исходов
            atoms: разбиение omega на непустые попарно непересекающиеся блоки
            name: идентификатор для описаний (опционально)

        Raises:
            SigmaAlgebraViolation: Если atoms не является разбиением omega
        """
        self._omega = as_event(omega)
        self._atoms = tuple(as_event(atom) for atom in atoms)
        self._name = name

        atom_of: dict = {}
        for atom in self._atoms:
            if not atom:
                raise SigmaAlgebraViolation("atoms must be non-empty")
            for outcome in atom:
                if outcome not in self._omega:
                    raise SigmaAlgebraViolation(
                        f"outcome {outcome!r} of an atom is outside the sample space"
                    )
                if outcome in atom_of:
                    raise SigmaAlgebraViolation(f"atoms overlap at outcome {outcome!r}")
                atom_of[outcome] = atom

        if len(atom_of) != len(self._omega):
            uncovered = next(o for o in sorted_outcomes(self._omega) if o not in atom_of)
            raise SigmaAlgebraViolation(f"atoms do not cover outcome {uncovered!r}")

        self._atom_of = atom_of

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_partition(
        cls, omega: Iterable, blocks: Iterable[Iterable], name: Optional[str] = None
    ) -> "SigmaAlgebra":
        return cls(omega, blocks, name=name)

    @classmethod
    def discrete(cls, omega: Iterable, name: Optional[str] = None) -> "SigmaAlgebra":
        """Дискретная sigma-алгебра: все подмножества измеримы."""
        omega = as_event(omega)
        return cls(omega, [[outcome] for outcome in sorted_outcomes(omega)], name=name)

    @classmethod
    def trivial(cls, omega: Iterable, name: Optional[str] = None) -> "SigmaAlgebra":
        """Тривиальная sigma-алгебра {∅, Ω}."""
        omega = as_event(omega)
        return cls(omega, [omega] if omega else [], name=name)

    @classmethod
    def generated_by(
        cls, omega: Iterable, family: Iterable[Iterable], name: Optional[str] = None
    ) -> "SigmaAlgebra":
        """
        Наименьшая sigma-алгебра, содержащая family.

        Каждый порождающий множество G измельчает текущее разбиение:
        блок B заменяется на B ∩ G и B \\ G (непустые части).

        Raises:
            SigmaAlgebraViolation: Если порождающее множество не содержится в Ω
        """
        omega = as_event(omega)
        blocks = [omega] if omega else []

        for generator in family:
            g = as_event(generator)
            if not g <= omega:
                raise SigmaAlgebraViolation(
                    f"generating set {sorted_outcomes(g)} is not contained in the sample space"
                )
            refined = []
            for block in blocks:
                inside = block & g
                outside = block - g
                if inside:
                    refined.append(inside)
                if outside:
                    refined.append(outside)
            blocks = refined

        return cls(omega, blocks, name=name)

    @classmethod
    def from_sets(
        cls, omega: Iterable, sets: Iterable[Iterable], name: Optional[str] = None
    ) -> "SigmaAlgebra":
        """
        Sigma-алгебра из явного семейства измеримых множеств.

        Raises:
            SigmaAlgebraViolation: Если семейство не содержит ∅ или Ω,
                не замкнуто относительно дополнения или объединения
        """
        omega = as_event(omega)
        family = {as_event(s) for s in sets}

        if frozenset() not in family:
            raise SigmaAlgebraViolation("family must contain the empty set")
        if omega not in family:
            raise SigmaAlgebraViolation("family must contain the whole sample space")

        for a in family:
            if not a <= omega:
                raise SigmaAlgebraViolation(
                    f"set {sorted_outcomes(a)} is not contained in the sample space"
                )
            if omega - a not in family:
                raise SigmaAlgebraViolation(
                    f"family is not closed under complement: missing complement of {sorted_outcomes(a)}"
                )

        for a, b in itertools.combinations(family, 2):
            if a | b not in family:
                raise SigmaAlgebraViolation(
                    f"family is not closed under union: missing {sorted_outcomes(a | b)}"
                )

        return cls.generated_by(omega, family, name=name)

    @classmethod
    def borel(cls, topology: "Topology", name: Optional[str] = None) -> "SigmaAlgebra":
        """Борелевская sigma-алгебра: порождена открытыми множествами топологии."""
        return cls.generated_by(
            topology.omega, topology.open_sets, name=name or f"borel({topology.identifier})"
        )

    @classmethod
    def comap(
        cls,
        omega: Iterable,
        function: OutcomeFunction,
        target: "SigmaAlgebra",
        name: Optional[str] = None,
    ) -> "SigmaAlgebra":
        """
        Sigma-алгебра на Ω, порождённая функцией f: Ω → E.

        Атомы — непустые прообразы атомов target.

        Raises:
            NotMeasurable: Если значение f лежит вне пространства target
        """
        omega = as_event(omega)
        table = tabulate(function, omega)

        blocks: dict = {}
        for outcome in sorted_outcomes(omega):
            value = table[outcome]
            if value not in target.omega:
                raise NotMeasurable(
                    f"value {value!r} at outcome {outcome!r} is outside the target space"
                )
            blocks.setdefault(target.atom_of(value), set()).add(outcome)

        return cls(omega, blocks.values(), name=name)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def omega(self) -> frozenset:
        return self._omega

    @property
    def atoms(self) -> tuple:
        return self._atoms

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def identifier(self) -> str:
        if self._name:
            return self._name
        return f"sigma[{len(self._atoms)} atoms/{len(self._omega)} outcomes]"

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def atom_of(self, outcome: Outcome) -> frozenset:
        """
        Атом, содержащий исход.

        Raises:
            KeyError: Если исход не принадлежит Ω
        """
        try:
            return self._atom_of[outcome]
        except KeyError:
            raise KeyError(f"outcome {outcome!r} is not in the sample space") from None

    def is_measurable(self, subset: Iterable) -> bool:
        """
        Проверка измеримости множества.

        Множество с исходами вне Ω не является событием и не измеримо.
        """
        s = as_event(subset)
        if not s <= self._omega:
            return False
        return all(self._atom_of[outcome] <= s for outcome in s)

    def require_measurable(self, subset: Iterable) -> frozenset:
        """
        Raises:
            NotMeasurable: Если множество не измеримо
        """
        s = as_event(subset)
        if not self.is_measurable(s):
            raise NotMeasurable(
                f"set {sorted_outcomes(s)} is not measurable in {self.identifier}"
            )
        return s

    def atoms_within(self, subset: Iterable) -> tuple:
        """Атомы, из которых состоит измеримое множество."""
        s = self.require_measurable(subset)
        return tuple(atom for atom in self._atoms if atom <= s)

    def atoms_meeting(self, subset: Iterable) -> tuple:
        """Атомы, пересекающие множество (множество может быть неизмеримым)."""
        s = as_event(subset)
        return tuple(atom for atom in self._atoms if atom & s)

    def complement(self, subset: Iterable) -> frozenset:
        return self._omega - self.require_measurable(subset)

    def measurable_sets(self) -> Iterator[frozenset]:
        """Перечисление всех 2^k измеримых множеств (k — число атомов)."""
        for r in range(len(self._atoms) + 1):
            for combo in itertools.combinations(self._atoms, r):
                yield frozenset().union(*combo)

    def is_sub_algebra_of(self, other: "SigmaAlgebra") -> bool:
        """Проверка self ⊆ other: каждое множество self измеримо в other."""
        if self._omega != other.omega:
            return False
        return all(other.is_measurable(atom) for atom in self._atoms)

    def is_discrete(self) -> bool:
        return all(len(atom) == 1 for atom in self._atoms)

    def is_standard_borel(self) -> bool:
        """
        Стандартное борелевское пространство.

        Конечное стандартное борелевское пространство измеримо изоморфно
        дискретному, поэтому условие совпадает с is_discrete.
        """
        return self.is_discrete()

    def is_borel_for(self, topology: "Topology") -> bool:
        return self == SigmaAlgebra.borel(topology)

    # -------------------------------------------------------------------------
    # Lattice operations
    # -------------------------------------------------------------------------

    def _require_same_space(self, other: "SigmaAlgebra") -> None:
        if self._omega != other.omega:
            raise ValueError(
                f"sigma-algebras {self.identifier} and {other.identifier} "
                f"live on different sample spaces"
            )

    def join(self, other: "SigmaAlgebra", name: Optional[str] = None) -> "SigmaAlgebra":
        """Наименьшая sigma-алгебра, содержащая обе (sup)."""
        self._require_same_space(other)
        return SigmaAlgebra.generated_by(self._omega, self._atoms + other.atoms, name=name)

    def meet(self, other: "SigmaAlgebra", name: Optional[str] = None) -> "SigmaAlgebra":
        """
        Пересечение sigma-алгебр (inf).

        Атомы — компоненты связности отношения "лежат в одном атоме self или other".
        """
        self._require_same_space(other)

        parent = {outcome: outcome for outcome in self._omega}

        def find(x):
            while parent[x] != x:
                parent[x] = parent[parent[x]]
                x = parent[x]
            return x

        for atom in self._atoms + other.atoms:
            first, *rest = sorted_outcomes(atom)
            for outcome in rest:
                parent[find(outcome)] = find(first)

        blocks: dict = {}
        for outcome in sorted_outcomes(self._omega):
            blocks.setdefault(find(outcome), set()).add(outcome)

        return SigmaAlgebra(self._omega, blocks.values(), name=name)

    def product(self, other: "SigmaAlgebra", name: Optional[str] = None) -> "SigmaAlgebra":
        """Произведение sigma-алгебр на Ω₁ × Ω₂ (атомы — прямоугольники атомов)."""
        omega = frozenset(itertools.product(self._omega, other.omega))
        atoms = [
            frozenset(itertools.product(a, b)) for a in self._atoms for b in other.atoms
        ]
        return SigmaAlgebra(
            omega, atoms, name=name or f"({self.identifier} x {other.identifier})"
        )

    # -------------------------------------------------------------------------
    # Value semantics
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SigmaAlgebra):
            return NotImplemented
        return self._omega == other._omega and frozenset(self._atoms) == frozenset(other._atoms)

    def __hash__(self) -> int:
        return hash((self._omega, frozenset(self._atoms)))

    def __repr__(self) -> str:
        return f"SigmaAlgebra({self.identifier})"

    def describe(self) -> SigmaAlgebraDescription:
        atoms = sorted(
            (sorted(outcome_key(o) for o in atom) for atom in self._atoms),
        )
        return SigmaAlgebraDescription(
            identifier=self.identifier,
            outcome_count=len(self._omega),
            atom_count=len(self._atoms),
            is_discrete=self.is_discrete(),
            atoms=atoms,
        )


# =============================================================================
# TOPOLOGY
# =============================================================================


class Topology:
    """
    Топология на конечном пространстве.

    Для конечного семейства замкнутость относительно произвольных объединений
    сводится к попарным объединениям.
    """

    __slots__ = ("_omega", "_open_sets", "_name")

    def __init__(self, omega: Iterable, open_sets: Iterable[Iterable], name: Optional[str] = None):
        """
        Raises:
            TopologyViolation: Если семейство не удовлетворяет аксиомам топологии
        """
        self._omega = as_event(omega)
        self._open_sets = frozenset(as_event(s) for s in open_sets)
        self._name = name

        if frozenset() not in self._open_sets:
            raise TopologyViolation("open sets must include the empty set")
        if self._omega not in self._open_sets:
            raise TopologyViolation("open sets must include the whole space")

        for s in self._open_sets:
            if not s <= self._omega:
                raise TopologyViolation(
                    f"open set {sorted_outcomes(s)} is not contained in the space"
                )

        for a, b in itertools.combinations(self._open_sets, 2):
            if a | b not in self._open_sets:
                raise TopologyViolation(
                    f"open sets are not closed under union: missing {sorted_outcomes(a | b)}"
                )
            if a & b not in self._open_sets:
                raise TopologyViolation(
                    f"open sets are not closed under intersection: missing {sorted_outcomes(a & b)}"
                )

    @classmethod
    def discrete(cls, omega: Iterable, name: Optional[str] = None) -> "Topology":
        """Дискретная топология (все подмножества открыты). Размер 2^|Ω|."""
        omega = as_event(omega)
        ordered = sorted_outcomes(omega)
        opens = [
            frozenset(combo)
            for r in range(len(ordered) + 1)
            for combo in itertools.combinations(ordered, r)
        ]
        return cls(omega, opens, name=name)

    @classmethod
    def indiscrete(cls, omega: Iterable, name: Optional[str] = None) -> "Topology":
        omega = as_event(omega)
        return cls(omega, [frozenset(), omega], name=name)

    @property
    def omega(self) -> frozenset:
        return self._omega

    @property
    def open_sets(self) -> frozenset:
        return self._open_sets

    @property
    def identifier(self) -> str:
        return self._name or f"topology[{len(self._open_sets)} open sets]"

    def is_open(self, subset: Iterable) -> bool:
        return as_event(subset) in self._open_sets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Topology):
            return NotImplemented
        return self._omega == other._omega and self._open_sets == other._open_sets

    def __hash__(self) -> int:
        return hash((self._omega, self._open_sets))

    def __repr__(self) -> str:
        return f"Topology({self.identifier})"
