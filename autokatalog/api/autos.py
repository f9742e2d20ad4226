import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from autokatalog.api.links import base_uri, to_model
from autokatalog.api.security import require_roles
from autokatalog.db import get_db
from autokatalog.models import AutoArt
from autokatalog.schemas.auto import AutosModel, EmbeddedAutos
from autokatalog.schemas.validation import parse_auto, parse_auto_update
from autokatalog.services import auto_read, auto_write
from autokatalog.services.exceptions import (
    AutoNotFound,
    DuplicateChassisNumber,
    NoMatches,
    ValidationFailed,
    VersionConflict,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["autos"])

APPLICATION_HAL_JSON = "application/hal+json"
ETAG_PATTERN = re.compile(r'^"(\d+)"$')
BOOLEANS = {"true": True, "false": False}
ACCEPTABLE = {"*/*", "application/*", "text/*", APPLICATION_HAL_JSON, "application/json", "text/html"}


def _hal(model: BaseModel, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        model.model_dump(by_alias=True, exclude_none=True, mode="json"),
        media_type=APPLICATION_HAL_JSON,
        headers=headers,
    )


def _etag(version: int) -> str:
    return f'"{version}"'


def _require_acceptable(accept: Optional[str]) -> None:
    if accept is None:
        return
    ranges = {part.split(";")[0].strip().lower() for part in accept.split(",")}
    if not ranges & ACCEPTABLE:
        raise HTTPException(status_code=status.HTTP_406_NOT_ACCEPTABLE, detail=f"Cannot produce {accept}")


def _require_id(auto_id: str) -> int:
    parsed = auto_read.parse_id(auto_id)
    if parsed is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"The Auto ID {auto_id} is invalid.")
    return parsed


@router.get("/{auto_id}")
def get_auto(
    auto_id: str,
    request: Request,
    if_none_match: Optional[str] = Header(default=None),
    accept: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    logger.debug("get_auto: id=%s if_none_match=%s", auto_id, if_none_match)
    _require_acceptable(accept)
    parsed_id = _require_id(auto_id)

    try:
        auto = auto_read.find_by_id(db, parsed_id)
    except AutoNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    etag = _etag(auto.version)
    if if_none_match == etag:
        logger.debug("get_auto: not modified")
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})

    return _hal(to_model(auto, base_uri(request)), headers={"ETag": etag})


@router.get("")
def get_autos(
    request: Request,
    fahrgestellnummer: Optional[str] = None,
    art: Optional[str] = None,
    lieferbar: Optional[str] = None,
    bezeichnung: Optional[str] = None,
    accept: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    _require_acceptable(accept)
    criteria: dict = {"fahrgestellnummer": fahrgestellnummer, "bezeichnung": bezeichnung}

    if art is not None:
        try:
            criteria["art"] = AutoArt(art)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"art {art} is not a valid Art.")

    if lieferbar is not None:
        if lieferbar.lower() not in BOOLEANS:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"lieferbar {lieferbar} is not a boolean.")
        criteria["lieferbar"] = BOOLEANS[lieferbar.lower()]

    logger.debug("get_autos: criteria=%s", criteria)
    try:
        autos = auto_read.find(db, criteria)
    except NoMatches as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))

    base = base_uri(request)
    models = [to_model(auto, base, full=False) for auto in autos]
    return _hal(AutosModel(embedded=EmbeddedAutos(autos=models)))


@router.post("", status_code=status.HTTP_201_CREATED)
def post_auto(
    request: Request,
    payload: Any = Body(...),
    roles: set = Depends(require_roles("admin", "user")),
    db: Session = Depends(get_db),
):
    logger.debug("post_auto: payload=%s", payload)
    try:
        dto = parse_auto(payload)
        auto_id = auto_write.create(db, dto.to_auto())
    except ValidationFailed as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.messages)
    except DuplicateChassisNumber as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    location = f"{base_uri(request)}/{auto_id}"
    logger.debug("post_auto: location=%s", location)
    return Response(status_code=status.HTTP_201_CREATED, headers={"Location": location})


@router.put("/{auto_id}", status_code=status.HTTP_204_NO_CONTENT)
def put_auto(
    auto_id: str,
    payload: Any = Body(...),
    if_match: Optional[str] = Header(default=None),
    roles: set = Depends(require_roles("admin", "user")),
    db: Session = Depends(get_db),
):
    logger.debug("put_auto: id=%s if_match=%s payload=%s", auto_id, if_match, payload)
    parsed_id = _require_id(auto_id)

    try:
        dto = parse_auto_update(payload)
    except ValidationFailed as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.messages)

    if if_match is None:
        raise HTTPException(status_code=status.HTTP_428_PRECONDITION_REQUIRED, detail='Header "If-Match" is missing')

    match = ETAG_PATTERN.match(if_match)
    if match is None:
        raise HTTPException(status_code=status.HTTP_412_PRECONDITION_FAILED, detail=f"{if_match} is not a valid version")

    try:
        new_version = auto_write.update(db, parsed_id, dto.to_auto(), int(match.group(1)))
    except AutoNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except DuplicateChassisNumber as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    except VersionConflict as exc:
        raise HTTPException(status_code=status.HTTP_412_PRECONDITION_FAILED, detail=str(exc))

    return Response(status_code=status.HTTP_204_NO_CONTENT, headers={"ETag": _etag(new_version)})


@router.delete("/{auto_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_auto(
    auto_id: str,
    roles: set = Depends(require_roles("admin")),
    db: Session = Depends(get_db),
):
    parsed_id = auto_read.parse_id(auto_id)
    if parsed_id is not None:
        performed = auto_write.delete(db, parsed_id)
        logger.debug("delete_auto: id=%s performed=%s", auto_id, performed)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
