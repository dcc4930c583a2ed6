"""
Domain enums for MealTracker application.
Contains all enumeration types used across the domain models.
"""

import enum


class SourceType(str, enum.Enum):
    """Where a recipe comes from"""

    BOOK = "book"
    WEBSITE = "website"


class TagCategory(str, enum.Enum):
    """Tag grouping"""

    CUISINE = "cuisine"
    GENERAL = "general"


class DishSortKey(str, enum.Enum):
    """Sort keys accepted by the dish listing (prefix with ``asc_`` to invert)"""

    NAME = "name"
    LAST_COOKED = "lastCooked"
    TIMES_COOKED = "timesCooked"
    CUISINE = "cuisine"
    LAST_COMMENT = "lastComment"


class SuggestionCategoryId(str, enum.Enum):
    """Dish suggestion buckets"""

    RELIABLE_FAVORITES = "reliable-favorites"
    BLAST_FROM_PAST = "blast-from-past"
    GIVE_IT_ANOTHER_SHOT = "give-it-another-shot"
    CUISINE_YOURE_MISSING = "cuisine-youre-missing"


class ErrorType(str, enum.Enum):
    """User-facing error categories"""

    # Network & API
    NETWORK_ERROR = "NETWORK_ERROR"
    API_ERROR = "API_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"

    # Authentication
    AUTH_ERROR = "AUTH_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    SESSION_EXPIRED = "SESSION_EXPIRED"

    # Database
    DATABASE_ERROR = "DATABASE_ERROR"
    CONSTRAINT_ERROR = "CONSTRAINT_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED = "MISSING_REQUIRED"

    # Application
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


class ErrorSeverity(str, enum.Enum):
    """How badly an error affects the user"""

    LOW = "LOW"  # non-blocking
    MEDIUM = "MEDIUM"  # some functionality affected
    HIGH = "HIGH"  # major functionality broken
    CRITICAL = "CRITICAL"  # unusable
