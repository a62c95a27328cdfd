import uuid
from typing import Optional, List
from sqlalchemy import String, Integer, ForeignKey, Date, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, date
from clubhouse.database import Base


class Match(Base):
    __tablename__ = "matches"

    # Client-generated uuid, doubles as the idempotency key for saves
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), index=True)
    club: Mapped["Club"] = relationship("Club", back_populates="matches")

    # Teams
    team_a_name: Mapped[str] = mapped_column(String(100))
    team_b_name: Mapped[str] = mapped_column(String(100))
    overs: Mapped[int] = mapped_column(Integer)

    # Toss
    toss_winner: Mapped[str] = mapped_column(String(100))
    toss_decision: Mapped[str] = mapped_column(String(10))  # "bat" or "bowl"

    # Final scores
    team_a_score: Mapped[int] = mapped_column(Integer, default=0)
    team_a_wickets: Mapped[int] = mapped_column(Integer, default=0)
    team_b_score: Mapped[int] = mapped_column(Integer, default=0)
    team_b_wickets: Mapped[int] = mapped_column(Integer, default=0)

    # Result
    winner: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # team name or "Tie"
    man_of_match: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # player name
    man_of_match_player_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    match_date: Mapped[date] = mapped_column(Date, default=date.today)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    player_stats: Mapped[List["MatchPlayerStat"]] = relationship(
        "MatchPlayerStat", back_populates="match", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Match {self.team_a_name} {self.team_a_score}/{self.team_a_wickets} vs {self.team_b_name} {self.team_b_score}/{self.team_b_wickets}>"


class MatchPlayerStat(Base):
    __tablename__ = "match_player_stats"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    match_id: Mapped[str] = mapped_column(ForeignKey("matches.id", ondelete="CASCADE"), index=True)
    match: Mapped["Match"] = relationship("Match", back_populates="player_stats")
    player_id: Mapped[str] = mapped_column(ForeignKey("players.id", ondelete="CASCADE"), index=True)
    player: Mapped["Player"] = relationship("Player", back_populates="match_stats")
    club_id: Mapped[str] = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), index=True)

    team: Mapped[str] = mapped_column(String(100))  # team name as on the match
    runs: Mapped[int] = mapped_column(Integer, default=0)
    wickets: Mapped[int] = mapped_column(Integer, default=0)

    # Scoring shot breakdown
    ones: Mapped[int] = mapped_column(Integer, default=0)
    twos: Mapped[int] = mapped_column(Integer, default=0)
    threes: Mapped[int] = mapped_column(Integer, default=0)
    fours: Mapped[int] = mapped_column(Integer, default=0)
    sixes: Mapped[int] = mapped_column(Integer, default=0)

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="unique_match_player"),
    )

    def __repr__(self):
        return f"<MatchPlayerStat match={self.match_id} player={self.player_id} {self.runs}r {self.wickets}w>"
