import enum

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship

from autokatalog.db import Base


class AutoArt(str, enum.Enum):
    LIMOUSINE = "LIMOUSINE"
    SUV = "SUV"


class Auto(Base):
    __tablename__ = "auto"

    id = Column(Integer, primary_key=True, index=True)
    version = Column(Integer, nullable=False, default=0)
    fahrgestellnummer = Column(String, unique=True, nullable=False, index=True)
    art = Column(SAEnum(AutoArt, native_enum=False, validate_strings=True), nullable=True)
    preis = Column(Numeric(10, 2), nullable=False)
    lieferbar = Column(Boolean, nullable=True)
    datum = Column(Date, nullable=True)
    erzeugt = Column(DateTime(timezone=True), nullable=False)
    aktualisiert = Column(DateTime(timezone=True), nullable=False)

    # Ownership runs Auto -> children only; children keep auto_id for the join.
    bezeichnung = relationship(
        "Bezeichnung",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined",
    )
    zubehoere = relationship(
        "Zubehoer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Zubehoer.id",
    )

    def __repr__(self):
        return (
            f"<Auto id={self.id} version={self.version} "
            f"fahrgestellnummer={self.fahrgestellnummer} art={self.art}>"
        )


class Bezeichnung(Base):
    __tablename__ = "bezeichnung"

    id = Column(Integer, primary_key=True, index=True)
    bezeichnung = Column(String(40), nullable=False)
    zusatz = Column(String(40), nullable=True)
    auto_id = Column(Integer, ForeignKey("auto.id", ondelete="CASCADE"), unique=True, nullable=False)


class Zubehoer(Base):
    __tablename__ = "zubehoer"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(32), nullable=False)
    beschreibung = Column(String(32), nullable=True)
    auto_id = Column(Integer, ForeignKey("auto.id", ondelete="CASCADE"), nullable=False, index=True)
