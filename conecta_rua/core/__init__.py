"""
Conecta Rua - Core Utilities
Central configuration, constants and the error taxonomy.
"""

from conecta_rua.core.config import settings
from conecta_rua.core.constants import (
    Category,
    ALL_CATEGORIES,
    ANONYMOUS_USER,
    get_category_label,
    get_category_color,
)
from conecta_rua.core.exceptions import (
    ConectaRuaError,
    ValidationError,
    AuthenticationRequiredError,
    BackendError,
    AuthError,
    StorageError,
    DataError,
)

__all__ = [
    "settings",
    "Category",
    "ALL_CATEGORIES",
    "ANONYMOUS_USER",
    "get_category_label",
    "get_category_color",
    "ConectaRuaError",
    "ValidationError",
    "AuthenticationRequiredError",
    "BackendError",
    "AuthError",
    "StorageError",
    "DataError",
]
