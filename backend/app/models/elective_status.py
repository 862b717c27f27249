from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class ElectiveStatus(str, Enum):
    complete = "complete"
    incomplete = "incomplete"
    over_assigned = "over_assigned"


class ElectiveAssignmentStatus(Base):
    __tablename__ = "elective_assignment_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    required_electives: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    assigned_electives: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    missing_electives: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    status: Mapped[ElectiveStatus] = mapped_column(
        SAEnum(ElectiveStatus, name="elective_status"),
        nullable=False,
        default=ElectiveStatus.incomplete,
        index=True,
    )
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
