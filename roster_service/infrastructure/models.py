# roster_service/infrastructure/models.py
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Integer, String, TIMESTAMP, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase): pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StudentORM(Base):
    __tablename__ = "Students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    roll_no: Mapped[str] = mapped_column(String(64), nullable=False, index=True)  # уникальность не проверяем
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        default=_utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return f"StudentORM(id={self.id!r}, roll_no={self.roll_no!r})"


__all__ = [
    "Base",
    "StudentORM",
]
