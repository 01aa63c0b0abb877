from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from hoopmetrix.core.database import Base

class Player(Base):
    """
    SQLAlchemy model representing an NBA or WNBA player.
    """
    __tablename__ = "players"

    # ------------------------------------------------------------------
    # PRIMARY KEY
    # ------------------------------------------------------------------
    id = Column(String(20), primary_key=True)       # Official stats id

    # ------------------------------------------------------------------
    # PERSONAL INFORMATION
    # ------------------------------------------------------------------
    name = Column(String, nullable=False, index=True)  # e.g., "Jayson Tatum"
    birth_date = Column(String, nullable=True)      # e.g., "MAR 03, 1998"
    college = Column(String, nullable=True)         # e.g., "Duke"
    photo_url = Column(String, nullable=True)

    # ------------------------------------------------------------------
    # PHYSICAL ATTRIBUTES & GAME INFO
    # ------------------------------------------------------------------
    league = Column(String(10), nullable=False, index=True)
    position = Column(String, nullable=True)        # e.g., "G", "F-C"
    height = Column(String, nullable=True)          # e.g., "6-8"
    weight = Column(String, nullable=True)          # e.g., "210"
    jersey_number = Column(Integer, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # ------------------------------------------------------------------
    # RELATIONSHIPS
    # ------------------------------------------------------------------
    team_id = Column(String(20), ForeignKey("teams.id"), nullable=True, index=True)

    team = relationship("Team", back_populates="players")
