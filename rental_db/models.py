# This project was developed with assistance from AI tools.
"""
Rental application lifecycle -- domain models

Applications with their resumable intake fields, the append-only payment
ledger, the conditional-approval requirement checklist, and the status
history trail.
"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ApplicationStatus,
    PaymentAttemptStatus,
    PaymentMethod,
    PaymentStatus,
    RejectionCategory,
    RequirementType,
)


class Application(Base):
    """Rental application for one applicant and one property."""

    __tablename__ = "applications"
    __table_args__ = (
        Index("ix_applications_applicant_property", "applicant_id", "property_id"),
        # At most one open application per applicant and property.
        # Enum columns store member names.
        Index(
            "uq_applications_open_applicant_property",
            "applicant_id",
            "property_id",
            unique=True,
            postgresql_where=text("status NOT IN ('APPROVED', 'REJECTED', 'WITHDRAWN', 'EXPIRED')"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    applicant_id = Column(String(255), nullable=False, index=True)
    property_id = Column(String(255), nullable=False, index=True)
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.DRAFT,
    )

    # Intake
    current_step = Column(Integer, nullable=False, default=1)
    last_saved_step = Column(Integer, nullable=False, default=1)
    fields = Column(JSON, nullable=False, default=dict)
    draft_revision = Column(BigInteger, nullable=False, default=0)
    submitted_at = Column(DateTime(timezone=True), nullable=True)

    # Screening score, computed at submission
    score = Column(Integer, nullable=True)
    score_breakdown = Column(JSON, nullable=True)
    scored_at = Column(DateTime(timezone=True), nullable=True)

    # Property snapshot taken when the draft is created
    property_title = Column(Text, nullable=True)
    property_address = Column(Text, nullable=True)
    property_owner_id = Column(String(255), nullable=True, index=True)
    application_fee = Column(Numeric(10, 2), nullable=True)

    # Payment
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_paid_at = Column(DateTime(timezone=True), nullable=True)

    # Info request
    info_requested_reason = Column(Text, nullable=True)
    info_requested_at = Column(DateTime(timezone=True), nullable=True)
    info_requested_by = Column(String(255), nullable=True)
    info_requested_due_date = Column(DateTime(timezone=True), nullable=True)

    # Conditional approval
    conditional_approval_reason = Column(Text, nullable=True)
    conditional_approval_due_date = Column(DateTime(timezone=True), nullable=True)
    conditional_approval_at = Column(DateTime(timezone=True), nullable=True)
    conditional_approval_by = Column(String(255), nullable=True)

    # Decision
    rejection_category = Column(
        Enum(RejectionCategory, name="rejection_category", native_enum=False),
        nullable=True,
    )
    rejection_reason = Column(Text, nullable=True)
    rejection_details = Column(JSON, nullable=True)
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    withdrawn_reason = Column(Text, nullable=True)

    # Expiry
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    expired_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version, "eager_defaults": True}

    requirements = relationship(
        "ConditionalRequirement",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ConditionalRequirement.position",
    )
    payment_attempts = relationship(
        "PaymentAttempt",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="PaymentAttempt.id",
    )
    status_events = relationship(
        "ApplicationStatusEvent",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ApplicationStatusEvent.id",
    )

    def __repr__(self):
        return f"<Application(id={self.id}, status='{self.status}')>"


class PaymentAttempt(Base):
    """One entry in the append-only application fee ledger."""

    __tablename__ = "payment_attempts"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    reference_id = Column(String(100), nullable=False, unique=True)
    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(
        Enum(PaymentMethod, name="payment_method", native_enum=False),
        nullable=False,
    )
    status = Column(
        Enum(PaymentAttemptStatus, name="payment_attempt_status", native_enum=False),
        nullable=False,
    )
    error_message = Column(Text, nullable=True)
    recorded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="payment_attempts")

    def __repr__(self):
        return f"<PaymentAttempt(app_id={self.application_id}, status='{self.status}')>"


class ConditionalRequirement(Base):
    """Checklist item attached when an application is conditionally approved."""

    __tablename__ = "conditional_requirements"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    position = Column(Integer, nullable=False, default=0)
    type = Column(
        Enum(RequirementType, name="requirement_type", native_enum=False),
        nullable=False,
    )
    description = Column(Text, nullable=False)
    required = Column(Boolean, nullable=False, default=True)
    satisfied = Column(Boolean, nullable=False, default=False)
    satisfied_at = Column(DateTime(timezone=True), nullable=True)
    satisfied_by = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    file_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="requirements")

    def __repr__(self):
        return f"<ConditionalRequirement(id={self.id}, satisfied={self.satisfied})>"


class ApplicationStatusEvent(Base):
    """Append-only record of one status change."""

    __tablename__ = "application_status_events"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    from_status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=True,
    )
    to_status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
    )
    actor_id = Column(String(255), nullable=False)
    actor = Column(String(50), nullable=False)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("Application", back_populates="status_events")

    def __repr__(self):
        return (
            f"<ApplicationStatusEvent(app_id={self.application_id}, "
            f"{self.from_status} -> {self.to_status})>"
        )
