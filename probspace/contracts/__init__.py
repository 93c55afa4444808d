"""
Contracts — JSON Schema контракты описаний probspace.
"""

from probspace.contracts.validators import (
    SCHEMA_DIR,
    available_contracts,
    contract_errors,
    contract_of,
    contract_validator,
    validate_description,
    validate_payload,
)

__all__ = [
    "SCHEMA_DIR",
    "available_contracts",
    "contract_errors",
    "contract_of",
    "contract_validator",
    "validate_description",
    "validate_payload",
]
