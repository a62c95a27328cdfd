import uuid
from typing import List
from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from clubhouse.database import Base


class Player(Base):
    __tablename__ = "players"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), index=True)
    club: Mapped["Club"] = relationship("Club", back_populates="players")

    name: Mapped[str] = mapped_column(String(100))  # Only mutable field
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Participation rows go with the player
    match_stats: Mapped[List["MatchPlayerStat"]] = relationship(
        "MatchPlayerStat", back_populates="player", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("name", "club_id", name="players_name_club_id_key"),
    )

    def __repr__(self):
        return f"<Player {self.name}>"
