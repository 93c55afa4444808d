"""Process — фильтрации, моменты остановки и мартингалы.

- Filtration: монотонное семейство под-алгебр, проверенное на окне индексов
- StoppingTime: момент остановки с явным TOP ("никогда не останавливается")
- StochasticProcess / is_adapted / is_martingale
"""

from .filtration import Filtration
from .martingale import (
    MartingaleKind,
    is_adapted,
    is_martingale,
    is_submartingale,
    is_supermartingale,
    satisfies_martingale_relation,
)
from .stochastic_process import StochasticProcess
from .stopping_time import TOP, Never, StoppingTime, is_stopping_time

__all__ = [
    "Filtration",
    "MartingaleKind",
    "Never",
    "StochasticProcess",
    "StoppingTime",
    "TOP",
    "is_adapted",
    "is_martingale",
    "is_stopping_time",
    "is_submartingale",
    "is_supermartingale",
    "satisfies_martingale_relation",
]
