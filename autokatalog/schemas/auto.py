from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from autokatalog.models import Auto, AutoArt, Bezeichnung, Zubehoer


class ZubehoerDTO(BaseModel):
    name: str
    beschreibung: Optional[str] = None


class BezeichnungDTO(BaseModel):
    bezeichnung: str
    zusatz: Optional[str] = None


class AutoUpdateDTO(BaseModel):
    """Root fields of an Auto, as accepted by update."""

    fahrgestellnummer: str
    art: Optional[AutoArt] = None
    preis: Decimal
    lieferbar: Optional[bool] = None
    datum: Optional[date] = None

    def to_auto(self) -> Auto:
        return Auto(
            fahrgestellnummer=self.fahrgestellnummer,
            art=self.art,
            preis=self.preis,
            lieferbar=self.lieferbar,
            datum=self.datum,
        )


class AutoDTO(AutoUpdateDTO):
    """A complete Auto with its Bezeichnung and Zubehoer, as accepted by create."""

    bezeichnung: BezeichnungDTO
    zubehoere: Optional[List[ZubehoerDTO]] = None

    def to_auto(self) -> Auto:
        auto = super().to_auto()
        auto.bezeichnung = Bezeichnung(
            bezeichnung=self.bezeichnung.bezeichnung,
            zusatz=self.bezeichnung.zusatz,
        )
        auto.zubehoere = [
            Zubehoer(name=zubehoer.name, beschreibung=zubehoer.beschreibung)
            for zubehoer in self.zubehoere or []
        ]
        return auto


# ----------------------------- Responses -----------------------------


class Link(BaseModel):
    href: str


class Links(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    self_: Link = Field(alias="self")
    list_: Optional[Link] = Field(default=None, alias="list")
    add: Optional[Link] = None
    update: Optional[Link] = None
    remove: Optional[Link] = None


class BezeichnungModel(BaseModel):
    bezeichnung: str
    zusatz: str


class AutoModel(BaseModel):
    """Public view of an Auto: no id, version, timestamps or Zubehoer."""

    model_config = ConfigDict(populate_by_name=True)

    fahrgestellnummer: str
    art: Optional[AutoArt] = None
    preis: float
    lieferbar: Optional[bool] = None
    datum: Optional[date] = None
    bezeichnung: BezeichnungModel
    links: Links = Field(alias="_links")


class EmbeddedAutos(BaseModel):
    autos: List[AutoModel]


class AutosModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    embedded: EmbeddedAutos = Field(alias="_embedded")
