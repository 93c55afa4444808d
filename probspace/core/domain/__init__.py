"""
Domain models and value objects.

Contains presentation-facing descriptions of core objects.
"""

from probspace.core.domain.descriptions import (
    AtomMass,
    ContractDescription,
    FiltrationDescription,
    MeasureDescription,
    RandomVariableDescription,
    SigmaAlgebraDescription,
)

__all__ = [
    "AtomMass",
    "ContractDescription",
    "FiltrationDescription",
    "MeasureDescription",
    "RandomVariableDescription",
    "SigmaAlgebraDescription",
]
