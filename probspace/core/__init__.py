"""
Core measure-theoretic objects, invariants and errors.

SigmaAlgebra underlies Measure; Measure (optionally wrapped as
ProbabilityMeasure) underlies CanonicalMeasureSpace; RandomVariable references
source and target sigma-algebras; independence is a query layered on top.
"""

from probspace.core.conditional import (
    SubalgebraWitness,
    certify_subalgebra,
    conditional_expectation,
)
from probspace.core.config import MeasureValidationConfig, ToleranceConfig, ValidationMode
from probspace.core.errors import (
    Checked,
    FiltrationViolation,
    InvalidSubalgebra,
    MeasureViolation,
    NotIntegrable,
    NotMeasurable,
    NotTotalToOne,
    ProbabilityCoreError,
    SigmaAlgebraViolation,
    StoppingTimeViolation,
    TopologyViolation,
)
from probspace.core.independence import (
    IndependenceReport,
    check_conditional_independence,
    check_independence,
    conditionally_independent_sets,
    conditionally_independent_sigma_algebras,
    explain_conditional_independence,
    explain_independence,
    independent_sets,
    independent_sigma_algebras,
    pairwise_independent,
)
from probspace.core.measure import Measure
from probspace.core.measure_space import CanonicalMeasureSpace
from probspace.core.probability import ProbabilityMeasure, cond, is_probability_measure
from probspace.core.random_variable import (
    Integrand,
    MeasurabilityWitness,
    RandomVariable,
    certify_measurable,
    finite_sum_integrator,
)
from probspace.core.sigma_algebra import SigmaAlgebra, Topology

__all__ = [
    # Errors
    "Checked",
    "FiltrationViolation",
    "InvalidSubalgebra",
    "MeasureViolation",
    "NotIntegrable",
    "NotMeasurable",
    "NotTotalToOne",
    "ProbabilityCoreError",
    "SigmaAlgebraViolation",
    "StoppingTimeViolation",
    "TopologyViolation",
    # Config
    "MeasureValidationConfig",
    "ToleranceConfig",
    "ValidationMode",
    # Structures
    "SigmaAlgebra",
    "Topology",
    "Measure",
    "ProbabilityMeasure",
    "CanonicalMeasureSpace",
    "RandomVariable",
    "MeasurabilityWitness",
    "Integrand",
    "SubalgebraWitness",
    "IndependenceReport",
    # Functions
    "certify_measurable",
    "certify_subalgebra",
    "check_conditional_independence",
    "check_independence",
    "cond",
    "conditional_expectation",
    "conditionally_independent_sets",
    "conditionally_independent_sigma_algebras",
    "explain_conditional_independence",
    "explain_independence",
    "finite_sum_integrator",
    "independent_sets",
    "independent_sigma_algebras",
    "is_probability_measure",
    "pairwise_independent",
]
