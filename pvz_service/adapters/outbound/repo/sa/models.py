from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, VARCHAR, DateTime, Uuid, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from pvz_service.adapters.outbound.repo.sa.base import Base, TablenameMixin, UUIDPKMixin

OPEN_RECEPTION_INDEX_NAME = "uq_reception_pvz_id_in_progress"
_IN_PROGRESS_CONDITION = text("status = 'in_progress'")


class Pvz(Base, TablenameMixin, UUIDPKMixin):
    registration_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    city: Mapped[str] = mapped_column(VARCHAR(128), nullable=False)


class Reception(Base, TablenameMixin, UUIDPKMixin):
    __table_args__ = (
        # Не более одной незакрытой приёмки на ПВЗ
        Index(OPEN_RECEPTION_INDEX_NAME, "pvz_id", unique=True,
              postgresql_where=_IN_PROGRESS_CONDITION,
              sqlite_where=_IN_PROGRESS_CONDITION),
        Index("ix_reception_pvz_id_date_time", "pvz_id", "date_time"),
    )

    date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    pvz_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("pvz.id"), nullable=False)
    status: Mapped[str] = mapped_column(VARCHAR(32), nullable=False)


class Product(Base, TablenameMixin, UUIDPKMixin):
    __table_args__ = (
        Index("ix_product_reception_id_date_time", "reception_id", "date_time"),
    )

    date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    type: Mapped[str] = mapped_column(VARCHAR(64), nullable=False)
    reception_id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("reception.id"), nullable=False)


class User(Base, UUIDPKMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(VARCHAR(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(VARCHAR(255), nullable=False)
    role: Mapped[str] = mapped_column(VARCHAR(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
