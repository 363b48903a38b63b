"""Id-issuing rows for taxa, characters and states.

The editable content of these entities lives in the revision content document;
the rows only guarantee globally unique ids and record the owning key.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from keybuilder.database import Base


class Taxon(Base):
    __tablename__ = "taxon"

    taxon_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Character(Base):
    __tablename__ = "taxon_character"

    character_id = Column(Integer, primary_key=True, autoincrement=True)
    key_id = Column(String(36), ForeignKey("artsapp_key.key_id"), nullable=False)
    type = Column(String(20), nullable=False)  # EXCLUSIVE/MULTISTATE/NUMERICAL
    created_at = Column(DateTime, server_default=func.now())


class CharacterState(Base):
    __tablename__ = "character_state"

    state_id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey("taxon_character.character_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
