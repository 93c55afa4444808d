"""
RandomVariable — измеримая функция между измеримыми пространствами

Случайная величина X: (Ω, F) → (E, G) конструируется только вместе со
свидетельством измеримости (MeasurabilityWitness): прообраз каждого атома G
измерим в F. Функция табулируется один раз; объект immutable.

Закон (распределение) X относительно меры μ — pushforward μ ∘ X⁻¹,
пересчитывается при каждом вызове law().

Математическое ожидание вычисляется внешним backend'ом (Integrator),
которому core отдаёт Integrand. Backend по умолчанию — точная конечная сумма.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from probspace.core.domain.descriptions import RandomVariableDescription
from probspace.core.errors import Checked, NotIntegrable, NotMeasurable, attempt
from probspace.core.math.numerical_safeguards import (
    MeasureValue,
    is_infinite,
    is_real_number,
    is_valid_float,
)
from probspace.core.sigma_algebra import (
    OutcomeFunction,
    SigmaAlgebra,
    as_event,
    outcome_key,
    sorted_outcomes,
    tabulate,
)

if TYPE_CHECKING:
    from probspace.core.measure import Measure

logger = logging.getLogger(__name__)


# =============================================================================
# MEASURABILITY WITNESS
# =============================================================================


@dataclass(frozen=True)
class MeasurabilityWitness:
    """Свидетельство измеримости функции source → target.

    Создаётся certify_measurable; хранит график функции, которую удостоверяет.
    """

    source: SigmaAlgebra
    target: SigmaAlgebra
    graph: frozenset

    def certifies(self, table: Mapping) -> bool:
        return frozenset(table.items()) == self.graph


def certify_measurable(
    function: OutcomeFunction, source: SigmaAlgebra, target: SigmaAlgebra
) -> MeasurabilityWitness:
    """
    Проверка измеримости функции и выдача свидетельства.

    Raises:
        NotMeasurable: Если функция не тотальна на Ω, принимает значение вне
            пространства target или прообраз атома target не измерим в source
    """
    table = tabulate(function, source.omega)

    for outcome in sorted_outcomes(source.omega):
        if table[outcome] not in target.omega:
            raise NotMeasurable(
                f"value {table[outcome]!r} at outcome {outcome!r} is outside the target space"
            )

    for atom in target.atoms:
        preimage = frozenset(w for w, v in table.items() if v in atom)
        if not source.is_measurable(preimage):
            logger.warning(
                "Function is not measurable: preimage of %s in %s",
                sorted_outcomes(atom),
                source.identifier,
            )
            raise NotMeasurable(
                f"preimage {sorted_outcomes(preimage)} of target set {sorted_outcomes(atom)} "
                f"is not measurable in {source.identifier}"
            )

    return MeasurabilityWitness(source=source, target=target, graph=frozenset(table.items()))


# =============================================================================
# INTEGRATION BOUNDARY
# =============================================================================


@dataclass(frozen=True)
class Integrand:
    """Пара (функция, мера), передаваемая backend'у интегрирования."""

    random_variable: "RandomVariable"
    measure: "Measure"

    def terms(self) -> tuple:
        """
        Слагаемые интеграла: (значение, мера множества уровня).

        Raises:
            NotMeasurable: Если множество уровня не измеримо для меры
        """
        rv = self.random_variable
        levels: dict = {}
        for outcome, value in rv.table.items():
            levels.setdefault(value, set()).add(outcome)

        return tuple(
            (value, self.measure.apply(outcomes))
            for value, outcomes in sorted(levels.items(), key=lambda item: outcome_key(item[0]))
        )


Integrator = Callable[[Integrand], MeasureValue]


def finite_sum_integrator(integrand: Integrand) -> MeasureValue:
    """
    Точный интеграл на конечном пространстве: Σ x · μ(X = x).

    Слагаемые с массой 0 пропускаются (значение на нулевом множестве не влияет).

    Raises:
        NotIntegrable: Если значение не действительное число, бесконечно на
            множестве положительной меры, или ненулевое на множестве
            бесконечной меры
    """
    total: MeasureValue = 0
    for value, mass in integrand.terms():
        if not is_real_number(value):
            raise NotIntegrable(f"value {value!r} is not a real number")
        if mass == 0:
            continue
        if isinstance(value, float) and not is_valid_float(value):
            raise NotIntegrable(f"value {value!r} on a set of positive measure")
        if is_infinite(mass):
            if value != 0:
                raise NotIntegrable(f"value {value!r} on a set of infinite measure")
            continue
        total += value * mass
    return total


# =============================================================================
# RANDOM VARIABLE
# =============================================================================


class RandomVariable:
    """Случайная величина X: Ω → E со свидетельством измеримости."""

    __slots__ = ("_witness", "_table", "_name")

    def __init__(
        self,
        function: OutcomeFunction,
        witness: MeasurabilityWitness,
        name: Optional[str] = None,
    ):
        """
        Args:
            function: callable или Mapping ω → значение
            witness: свидетельство измеримости, выданное certify_measurable
            name: идентификатор (опционально)

        Raises:
            NotMeasurable: Если witness отсутствует или удостоверяет другую функцию
        """
        if not isinstance(witness, MeasurabilityWitness):
            raise NotMeasurable("a measurability witness is required")

        table = tabulate(function, witness.source.omega)
        if not witness.certifies(table):
            raise NotMeasurable("witness does not certify this function")

        self._witness = witness
        self._table = MappingProxyType(table)
        self._name = name
        logger.debug("Constructed random variable %s", self.identifier)

    # -------------------------------------------------------------------------
    # Named constructors
    # -------------------------------------------------------------------------

    @classmethod
    def construct(
        cls,
        function: OutcomeFunction,
        source: SigmaAlgebra,
        target: SigmaAlgebra,
        name: Optional[str] = None,
    ) -> "RandomVariable":
        """Проверка измеримости и конструирование (fail-fast)."""
        return cls(function, certify_measurable(function, source, target), name=name)

    @classmethod
    def try_construct(
        cls,
        function: OutcomeFunction,
        source: SigmaAlgebra,
        target: SigmaAlgebra,
        name: Optional[str] = None,
    ) -> Checked["RandomVariable"]:
        return attempt(cls.construct, function, source, target, name=name)

    @classmethod
    def real(
        cls, function: OutcomeFunction, source: SigmaAlgebra, name: Optional[str] = None
    ) -> "RandomVariable":
        """
        Действительнозначная величина; target — дискретная алгебра на образе.

        Raises:
            NotMeasurable: Если функция не постоянна на атомах source
        """
        table = tabulate(function, source.omega)
        target = SigmaAlgebra.discrete(set(table.values()), name="discrete(image)")
        return cls.construct(table, source, target, name=name)

    @classmethod
    def indicator(
        cls, source: SigmaAlgebra, event: Iterable, name: Optional[str] = None
    ) -> "RandomVariable":
        """
        Индикатор 1_A измеримого события A.

        Raises:
            NotMeasurable: Если A не измеримо
        """
        e = source.require_measurable(event)
        return cls.real(lambda w: 1 if w in e else 0, source, name=name or "indicator")

    @classmethod
    def constant(
        cls, source: SigmaAlgebra, value: Any, name: Optional[str] = None
    ) -> "RandomVariable":
        return cls.real(lambda w: value, source, name=name or f"const({value!r})")

    @classmethod
    def identity(cls, sigma_algebra: SigmaAlgebra, name: Optional[str] = None) -> "RandomVariable":
        return cls.construct(lambda w: w, sigma_algebra, sigma_algebra, name=name or "id")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def source(self) -> SigmaAlgebra:
        return self._witness.source

    @property
    def target(self) -> SigmaAlgebra:
        return self._witness.target

    @property
    def witness(self) -> MeasurabilityWitness:
        return self._witness

    @property
    def table(self) -> Mapping:
        return self._table

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def identifier(self) -> str:
        return self._name or f"rv[{self.source.identifier} -> {self.target.identifier}]"

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def __call__(self, outcome: Any) -> Any:
        try:
            return self._table[outcome]
        except KeyError:
            raise KeyError(f"outcome {outcome!r} is not in the sample space") from None

    def preimage(self, subset: Iterable) -> frozenset:
        """X⁻¹(B) = {ω : X(ω) ∈ B}."""
        s = as_event(subset)
        return frozenset(w for w, v in self._table.items() if v in s)

    def image(self) -> frozenset:
        return frozenset(self._table.values())

    def generated_sigma_algebra(self) -> SigmaAlgebra:
        """σ(X): sigma-алгебра на Ω, порождённая X."""
        return SigmaAlgebra.comap(
            self.source.omega, self._table, self.target, name=f"sigma({self.identifier})"
        )

    def is_measurable_wrt(self, sigma_algebra: SigmaAlgebra) -> bool:
        """Измеримость X относительно другой sigma-алгебры на том же Ω."""
        if sigma_algebra.omega != self.source.omega:
            return False
        return self.generated_sigma_algebra().is_sub_algebra_of(sigma_algebra)

    def law(self, measure: "Measure") -> "Measure":
        """Закон X относительно μ (pushforward, без кэширования)."""
        return measure.pushforward(self)

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def compose(
        self,
        function: Callable[[Any], Any],
        target: SigmaAlgebra,
        name: Optional[str] = None,
    ) -> "RandomVariable":
        """
        g ∘ X с проверкой измеримости композиции.

        Raises:
            NotMeasurable: Если g ∘ X не измерима
        """
        table = {w: function(v) for w, v in self._table.items()}
        return RandomVariable.construct(table, self.source, target, name=name)

    def pair(self, other: "RandomVariable", name: Optional[str] = None) -> "RandomVariable":
        """Совместная величина ω ↦ (X(ω), Y(ω)) в произведение пространств."""
        if other.source != self.source:
            raise ValueError("paired random variables must share the source sigma-algebra")
        table = {w: (v, other.table[w]) for w, v in self._table.items()}
        return RandomVariable.construct(
            table,
            self.source,
            self.target.product(other.target),
            name=name or f"({self.identifier}, {other.identifier})",
        )

    # -------------------------------------------------------------------------
    # Integration
    # -------------------------------------------------------------------------

    def expectation(
        self, measure: "Measure", integrator: Optional[Integrator] = None
    ) -> MeasureValue:
        """
        E_μ[X] = ∫ X dμ.

        Args:
            measure: мера на Ω
            integrator: backend интегрирования (default: finite_sum_integrator)

        Raises:
            NotIntegrable: Если интеграл не сходится абсолютно
            NotMeasurable: Если X определена на другом Ω или не измерима
                относительно sigma-алгебры меры
        """
        if not self.is_measurable_wrt(measure.sigma_algebra):
            raise NotMeasurable(
                f"{self.identifier} is not measurable with respect to "
                f"{measure.sigma_algebra.identifier}"
            )
        integrator = integrator or finite_sum_integrator
        return integrator(Integrand(random_variable=self, measure=measure))

    def variance(
        self, measure: "Measure", integrator: Optional[Integrator] = None
    ) -> MeasureValue:
        """Var_μ[X] = E_μ[(X - E_μ[X])²]."""
        mean = self.expectation(measure, integrator)
        squared = RandomVariable.real(
            {w: (v - mean) ** 2 for w, v in self._table.items()}, self.source
        )
        return squared.expectation(measure, integrator)

    # -------------------------------------------------------------------------
    # Value semantics
    # -------------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RandomVariable):
            return NotImplemented
        return (
            self.source == other.source
            and self.target == other.target
            and self._witness.graph == other.witness.graph
        )

    def __hash__(self) -> int:
        return hash((self.source, self.target, self._witness.graph))

    def __repr__(self) -> str:
        return f"RandomVariable({self.identifier})"

    def describe(self) -> RandomVariableDescription:
        return RandomVariableDescription(
            identifier=self.identifier,
            source=self.source.identifier,
            target=self.target.identifier,
            image=sorted(outcome_key(v) for v in self.image()),
        )
