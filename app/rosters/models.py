"""SQLAlchemy models for imported student lists."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from db import Base


class RosterList(Base):
    """A student list uploaded by a faculty member."""

    __tablename__ = "roster_lists"

    id = Column(Integer, primary_key=True, index=True)
    faculty_id = Column(String(128), nullable=False, index=True)
    source_filename = Column(String(255), nullable=True)
    student_count = Column(Integer, nullable=False, default=0)
    imported_at = Column(DateTime(timezone=True), nullable=False, index=True)

    entries = relationship(
        "RosterListEntry",
        back_populates="roster_list",
        cascade="all, delete-orphan",
        order_by="RosterListEntry.id",
        lazy="selectin",
    )


class RosterListEntry(Base):
    """One student row of an imported list."""

    __tablename__ = "roster_list_entries"

    id = Column(Integer, primary_key=True, index=True)
    roster_list_id = Column(
        Integer,
        ForeignKey("roster_lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_name = Column(String(200), nullable=False)
    registration_number = Column(String(64), nullable=False)

    roster_list = relationship("RosterList", back_populates="entries")
