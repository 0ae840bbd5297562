"""SQLAlchemy ORM model for the tenant_infrastructure table.

One row per tenant holding the lifecycle state of its infrastructure.
The ``version`` column backs the registry's compare-and-swap writes.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, CreatedAtMixin


class TenantInfrastructureModel(Base, CreatedAtMixin):
    """ORM model for tenant_infrastructure table.

    Enum-valued columns store the enum's string value; the registry maps
    them back to domain enums when reconstituting the aggregate.
    """

    __tablename__ = "tenant_infrastructure"

    tenant_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    tier: Mapped[str] = mapped_column(String(16), nullable=False)
    provisioning_state: Mapped[str] = mapped_column(String(32), nullable=False)
    operation: Mapped[str] = mapped_column(String(16), nullable=False)
    target_account_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    template_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stack_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    stack_id: Mapped[str | None] = mapped_column(String(512), nullable=True)
    poll_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_polled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    operation_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_detail: Mapped[str | None] = mapped_column(Text, nullable=True)
    stack_outputs: Mapped[dict[str, str]] = mapped_column(nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_tenant_infrastructure_state", "provisioning_state"),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<TenantInfrastructureModel(tenant_id={self.tenant_id}, "
            f"state={self.provisioning_state}, version={self.version})>"
        )
