"""
GraphQL surface of the catalog.

Queries ``auto(id)`` and ``autos(suchkriterien)`` are public. The mutations
``create`` and ``update`` need the role admin or user, ``delete`` needs admin.
Service errors come back as GraphQL errors with code BAD_USER_INPUT.
"""

import logging
from datetime import date
from typing import List, Optional, Set, Tuple

import strawberry
from fastapi import Depends
from graphql import GraphQLError
from sqlalchemy.orm import Session
from strawberry.fastapi import GraphQLRouter
from strawberry.permission import BasePermission
from strawberry.types import Info

from autokatalog.api.security import MSG_FORBIDDEN, optional_roles
from autokatalog.db import get_db
from autokatalog.models import Auto, AutoArt
from autokatalog.schemas.validation import parse_auto, parse_auto_update
from autokatalog.services import auto_read, auto_write
from autokatalog.services.exceptions import AutoServiceError

logger = logging.getLogger(__name__)

BAD_USER_INPUT = "BAD_USER_INPUT"

strawberry.enum(AutoArt, name="Art")


def _user_error(message: str) -> GraphQLError:
    return GraphQLError(message, extensions={"code": BAD_USER_INPUT})


def _require_id(text: str) -> int:
    auto_id = auto_read.parse_id(text)
    if auto_id is None:
        raise _user_error(f"The Auto ID {text} is invalid.")
    return auto_id


# ------------------------------- Types -------------------------------


@strawberry.type(name="Bezeichnung")
class BezeichnungType:
    bezeichnung: str
    zusatz: Optional[str]


@strawberry.type(name="Zubehoer")
class ZubehoerType:
    name: str
    beschreibung: Optional[str]


@strawberry.type(name="Auto")
class AutoType:
    version: int
    fahrgestellnummer: str
    art: Optional[AutoArt]
    preis: float
    lieferbar: Optional[bool]
    datum: Optional[date]
    bezeichnung: Optional[BezeichnungType]
    zubehoere: List[ZubehoerType]

    @classmethod
    def from_model(cls, auto: Auto) -> "AutoType":
        bezeichnung = auto.bezeichnung
        return cls(
            version=auto.version,
            fahrgestellnummer=auto.fahrgestellnummer,
            art=auto.art,
            preis=float(auto.preis),
            lieferbar=auto.lieferbar,
            datum=auto.datum,
            bezeichnung=(
                BezeichnungType(bezeichnung=bezeichnung.bezeichnung, zusatz=bezeichnung.zusatz)
                if bezeichnung is not None
                else None
            ),
            zubehoere=[ZubehoerType(name=z.name, beschreibung=z.beschreibung) for z in auto.zubehoere],
        )


@strawberry.type
class CreatePayload:
    id: int


@strawberry.type
class UpdatePayload:
    version: int


# ------------------------------- Inputs ------------------------------


@strawberry.input
class SuchkriterienInput:
    fahrgestellnummer: Optional[str] = None
    art: Optional[AutoArt] = None
    lieferbar: Optional[bool] = None
    bezeichnung: Optional[str] = None


@strawberry.input
class BezeichnungInput:
    bezeichnung: str
    zusatz: Optional[str] = None


@strawberry.input
class ZubehoerInput:
    name: str
    beschreibung: Optional[str] = None


@strawberry.input
class AutoInput:
    fahrgestellnummer: str
    preis: float
    bezeichnung: BezeichnungInput
    art: Optional[AutoArt] = None
    lieferbar: Optional[bool] = None
    datum: Optional[date] = None
    zubehoere: Optional[List[ZubehoerInput]] = None


@strawberry.input
class AutoUpdateInput:
    id: strawberry.ID
    version: int
    fahrgestellnummer: str
    preis: float
    art: Optional[AutoArt] = None
    lieferbar: Optional[bool] = None
    datum: Optional[date] = None


def _root_payload(data) -> dict:
    """Root fields of an input as the JSON shape the validators expect."""
    return {
        "fahrgestellnummer": data.fahrgestellnummer,
        "art": data.art.value if data.art is not None else None,
        "preis": data.preis,
        "lieferbar": data.lieferbar,
        "datum": data.datum.isoformat() if data.datum is not None else None,
    }


def _auto_payload(data: AutoInput) -> dict:
    payload = _root_payload(data)
    payload["bezeichnung"] = {
        "bezeichnung": data.bezeichnung.bezeichnung,
        "zusatz": data.bezeichnung.zusatz,
    }
    if data.zubehoere is not None:
        payload["zubehoere"] = [
            {"name": zubehoer.name, "beschreibung": zubehoer.beschreibung} for zubehoer in data.zubehoere
        ]
    return payload


# ----------------------------- Permissions ---------------------------


class _HasRole(BasePermission):
    message = MSG_FORBIDDEN
    error_extensions = {"code": "FORBIDDEN"}
    roles: Tuple[str, ...] = ()

    def has_permission(self, source, info: Info, **kwargs) -> bool:
        return bool(info.context["roles"].intersection(self.roles))


class IsAdminOrUser(_HasRole):
    roles = ("admin", "user")


class IsAdmin(_HasRole):
    roles = ("admin",)


# ------------------------------ Resolvers ----------------------------


@strawberry.type
class Query:
    @strawberry.field
    def auto(self, info: Info, id: strawberry.ID) -> Optional[AutoType]:
        logger.debug("auto: id=%s", id)
        auto_id = _require_id(id)
        try:
            auto = auto_read.find_by_id(info.context["db"], auto_id)
        except AutoServiceError as exc:
            raise _user_error(str(exc)) from exc
        return AutoType.from_model(auto)

    @strawberry.field
    def autos(self, info: Info, suchkriterien: Optional[SuchkriterienInput] = None) -> List[AutoType]:
        logger.debug("autos: suchkriterien=%s", suchkriterien)
        criteria = {}
        if suchkriterien is not None:
            criteria = {
                "fahrgestellnummer": suchkriterien.fahrgestellnummer,
                "art": suchkriterien.art,
                "lieferbar": suchkriterien.lieferbar,
                "bezeichnung": suchkriterien.bezeichnung,
            }
        try:
            autos = auto_read.find(info.context["db"], criteria)
        except AutoServiceError as exc:
            raise _user_error(str(exc)) from exc
        return [AutoType.from_model(auto) for auto in autos]


@strawberry.type
class Mutation:
    @strawberry.mutation(permission_classes=[IsAdminOrUser])
    def create(self, info: Info, input: AutoInput) -> Optional[CreatePayload]:
        logger.debug("create: input=%s", input)
        try:
            dto = parse_auto(_auto_payload(input))
            auto_id = auto_write.create(info.context["db"], dto.to_auto())
        except AutoServiceError as exc:
            raise _user_error(str(exc)) from exc
        logger.debug("create: id=%d", auto_id)
        return CreatePayload(id=auto_id)

    @strawberry.mutation(permission_classes=[IsAdminOrUser])
    def update(self, info: Info, input: AutoUpdateInput) -> Optional[UpdatePayload]:
        logger.debug("update: input=%s", input)
        auto_id = _require_id(input.id)
        try:
            dto = parse_auto_update(_root_payload(input))
            version = auto_write.update(info.context["db"], auto_id, dto.to_auto(), input.version)
        except AutoServiceError as exc:
            raise _user_error(str(exc)) from exc
        logger.debug("update: version=%d", version)
        return UpdatePayload(version=version)

    @strawberry.mutation(permission_classes=[IsAdmin])
    def delete(self, info: Info, id: strawberry.ID) -> Optional[bool]:
        logger.debug("delete: id=%s", id)
        auto_id = auto_read.parse_id(id)
        if auto_id is None:
            return False
        return auto_write.delete(info.context["db"], auto_id)


def get_context(
    db: Session = Depends(get_db),
    roles: Set[str] = Depends(optional_roles),
) -> dict:
    return {"db": db, "roles": roles}


schema = strawberry.Schema(query=Query, mutation=Mutation)

router = GraphQLRouter(schema, context_getter=get_context)
