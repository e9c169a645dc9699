# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    Actor,
    ApplicationStatus,
    PaymentAttemptStatus,
    PaymentMethod,
    PaymentStatus,
    RejectionCategory,
    RequirementType,
    UserRole,
)
from .models import (
    Application,
    ApplicationStatusEvent,
    ConditionalRequirement,
    PaymentAttempt,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "Actor",
    "ApplicationStatus",
    "PaymentAttemptStatus",
    "PaymentMethod",
    "PaymentStatus",
    "RejectionCategory",
    "RequirementType",
    "UserRole",
    # Models
    "Application",
    "ApplicationStatusEvent",
    "ConditionalRequirement",
    "PaymentAttempt",
]
