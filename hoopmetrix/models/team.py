from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from hoopmetrix.core.database import Base

class Team(Base):
    """
    SQLAlchemy model representing an NBA or WNBA team.
    """
    __tablename__ = "teams"

    # ------------------------------------------------------------------
    # PRIMARY KEY
    # ------------------------------------------------------------------
    # Official stats id, kept as text (e.g., "1610612738")
    id = Column(String(20), primary_key=True)

    # ------------------------------------------------------------------
    # LEAGUE CLASSIFICATION
    # ------------------------------------------------------------------
    league = Column(String(10), nullable=False, index=True)   # "NBA" or "WNBA"
    conference = Column(String, nullable=True)                 # e.g., "East"
    division = Column(String, nullable=True)                   # e.g., "Atlantic"

    # ------------------------------------------------------------------
    # IDENTITY
    # ------------------------------------------------------------------
    name = Column(String, nullable=False)                      # e.g., "Boston Celtics"
    city = Column(String, nullable=False)                      # e.g., "Boston"

    # Indexed for faster lookup by standard tricode abbreviation
    abbreviation = Column(String(10), nullable=False, index=True)  # e.g., "BOS"

    logo_url = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # ------------------------------------------------------------------
    # RELATIONSHIPS
    # ------------------------------------------------------------------
    players = relationship("Player", back_populates="team")
