"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from appeal_engine.adapters.persistence.database import Base


class AdminWorkloadModel(Base):
    __tablename__ = "admin_workloads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    admin_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False)
    active_appeals_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_appeals_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_activity_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    expertise: Mapped[list["AdminCategoryExpertiseModel"]] = relationship(
        back_populates="workload"
    )

    __table_args__ = (
        CheckConstraint("active_appeals_count >= 0", name="ck_workload_active_non_negative"),
        CheckConstraint("total_appeals_count >= 0", name="ck_workload_total_non_negative"),
        Index("idx_workloads_available", "is_available"),
    )


class AdminCategoryExpertiseModel(Base):
    __tablename__ = "admin_category_expertise"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    admin_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("admin_workloads.admin_id"), nullable=False
    )
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    experience_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    successful_resolutions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_resolutions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    workload: Mapped["AdminWorkloadModel"] = relationship(back_populates="expertise")

    __table_args__ = (
        UniqueConstraint("admin_id", "category", name="uq_expertise_admin_category"),
        CheckConstraint(
            "experience_level BETWEEN 1 AND 5", name="ck_expertise_level_range"
        ),
        CheckConstraint(
            "successful_resolutions >= 0 AND successful_resolutions <= total_resolutions",
            name="ck_expertise_resolutions",
        ),
        Index("idx_expertise_category", "category"),
    )
