"""HAL rendering of Autos: public fields plus navigational links."""

from fastapi import Request

from autokatalog.models import Auto
from autokatalog.schemas.auto import AutoModel, BezeichnungModel, Link, Links
from autokatalog.services.auto_read import ID_PATTERN

NOT_AVAILABLE = "N/A"


def base_uri(request: Request) -> str:
    """Request URL without query string and without a trailing id segment."""
    path = request.url.path.rstrip("/")
    head, _, last = path.rpartition("/")
    if head and ID_PATTERN.fullmatch(last):
        path = head
    return f"{request.url.scheme}://{request.url.netloc}{path}"


def links_for(base: str, auto_id: int, full: bool = True) -> Links:
    own = Link(href=f"{base}/{auto_id}")
    if not full:
        return Links(self_=own)
    return Links(
        self_=own,
        list_=Link(href=base),
        add=Link(href=base),
        update=own,
        remove=own,
    )


def to_model(auto: Auto, base: str, full: bool = True) -> AutoModel:
    bezeichnung = auto.bezeichnung
    return AutoModel(
        fahrgestellnummer=auto.fahrgestellnummer,
        art=auto.art,
        preis=float(auto.preis),
        lieferbar=auto.lieferbar,
        datum=auto.datum,
        bezeichnung=BezeichnungModel(
            bezeichnung=bezeichnung.bezeichnung if bezeichnung and bezeichnung.bezeichnung else NOT_AVAILABLE,
            zusatz=bezeichnung.zusatz if bezeichnung and bezeichnung.zusatz else NOT_AVAILABLE,
        ),
        links=links_for(base, auto.id, full),
    )
