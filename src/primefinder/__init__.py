from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("primefinder")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .controller import CalculationController, CalculationRequest
from .fmt import describe
from .history import History
from .number_theory import (
    BOUND,
    all_factors,
    find_next_prime,
    find_previous_prime,
    is_mersenne_prime,
    is_prime,
    prime_factors,
)
from .runtime import APPLY, CFG
from .utility import UserInputError
from .validator import InvalidInputError, is_valid_input, parse
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "BOUND",
    "CFG",
    "CalculationController",
    "CalculationRequest",
    "History",
    "InvalidInputError",
    "UserInputError",
    "__version__",
    "all_factors",
    "describe",
    "find_next_prime",
    "find_previous_prime",
    "has_profile",
    "is_mersenne_prime",
    "is_prime",
    "is_valid_input",
    "load_settings",
    "parse",
    "prime_factors",
    "read_current_profile",
    "workspace_dir",
]
