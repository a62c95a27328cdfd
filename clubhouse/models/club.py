"""
Club model - the tenant that owns players and matches
"""
import uuid
from typing import List
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from clubhouse.database import Base


class Club(Base):
    __tablename__ = "clubs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    players: Mapped[List["Player"]] = relationship("Player", back_populates="club", cascade="all, delete-orphan")
    matches: Mapped[List["Match"]] = relationship("Match", back_populates="club", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Club '{self.name}'>"
