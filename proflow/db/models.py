"""SQLAlchemy database models."""

import enum
from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, BigInteger, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.dialects.mysql import CHAR
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def generate_uuid() -> str:
    """Generate a UUID string for primary keys.

    Returns:
        str: UUID as 36-character string.
    """
    return str(uuid4())


class Stage(str, enum.Enum):
    """Workflow stage of a work item, in board column order."""

    DESIGN = "design"
    ENGINEERING = "engineering"
    CNC = "cnc"
    PRODUCTION = "production"
    WARRANTY = "warranty"


STAGE_LABELS: dict[Stage, str] = {
    Stage.DESIGN: "Thiết kế",
    Stage.ENGINEERING: "Kỹ thuật",
    Stage.CNC: "Gia công",
    Stage.PRODUCTION: "Sản xuất",
    Stage.WARRANTY: "Bảo hành",
}


class WorkItem(Base):
    """A trackable production task.

    Attributes:
        id: Primary key UUID, assigned by the store.
        title: Order / project identifier.
        client: Client display name.
        task_name: Free-text task description.
        stage: Workflow stage.
        tags: Smart tags derived from the task description.
        start_date: ISO date the task starts.
        duration: Length in days.
        priority: Low / Medium / High.
        progress: Completion percentage.
        created_at: Creation time in epoch milliseconds, never updated.
    """

    __tablename__ = "work_items"
    __table_args__ = (
        Index("ix_work_items_title_task", "title", "task_name"),
        Index("ix_work_items_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(CHAR(36), primary_key=True, default=generate_uuid)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    client: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")
    task_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    stage: Mapped[Stage] = mapped_column(
        Enum(Stage, values_callable=lambda x: [e.value for e in x]), default=Stage.DESIGN
    )
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    start_date: Mapped[str] = mapped_column(String(10), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="Medium")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class Preference(Base):
    """Single persisted key/value preference.

    Attributes:
        key: Preference name.
        value: Stored string value.
        updated_at: Last write time.
    """

    __tablename__ = "preferences"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )
