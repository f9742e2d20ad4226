"""
Write operations for Autos: create, update and delete.

Every operation runs as one transaction on the given session and either
commits completely or rolls back.

- create: the chassis number is checked with a criteria lookup and, for the
  window between that lookup and the INSERT, by the unique constraint on
  auto.fahrgestellnummer.
- update: the expected version is compared first, then written with a
  conditional UPDATE ... WHERE version = :expected. A concurrent writer that
  got there first leaves zero matched rows, which is reported as
  VersionConflict, unless the row is gone altogether (AutoNotFound).
- delete: absence is not an error, the return value tells whether a row
  was removed. Bezeichnung and Zubehoer go with their Auto.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy import update as sql_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from autokatalog.db import transaction
from autokatalog.models import Auto
from autokatalog.services.criteria import build_query
from autokatalog.services.exceptions import AutoNotFound, DuplicateChassisNumber, VersionConflict

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _check_fahrgestellnummer(db: Session, fahrgestellnummer: str, own_id: Optional[int] = None) -> None:
    existing = db.scalars(build_query({"fahrgestellnummer": fahrgestellnummer})).unique().first()
    if existing is not None and existing.id != own_id:
        logger.warning(
            "Duplicate fahrgestellnummer: value=%s existing_id=%s", fahrgestellnummer, existing.id
        )
        raise DuplicateChassisNumber(fahrgestellnummer)


def _is_fahrgestellnummer_violation(exc: IntegrityError) -> bool:
    return "fahrgestellnummer" in str(exc.orig).lower()


def create(db: Session, auto: Auto) -> int:
    """Persist a new Auto with its Bezeichnung and Zubehoer, return its id."""
    logger.debug("create: %r", auto)

    with transaction(db):
        _check_fahrgestellnummer(db, auto.fahrgestellnummer)

        now = _now()
        auto.id = None
        auto.version = 0
        auto.erzeugt = now
        auto.aktualisiert = now
        db.add(auto)

        try:
            db.flush()
        except IntegrityError as exc:
            if not _is_fahrgestellnummer_violation(exc):
                raise
            # Another writer committed the same chassis number after our lookup
            logger.warning("Duplicate fahrgestellnummer at insert: value=%s", auto.fahrgestellnummer)
            raise DuplicateChassisNumber(auto.fahrgestellnummer) from exc

        auto_id = auto.id

    logger.debug("create: id=%d", auto_id)
    return auto_id


def update(db: Session, auto_id: int, auto: Auto, version: int) -> int:
    """Replace the scalar fields of an Auto if ``version`` is still current.

    Bezeichnung and Zubehoer are not touched. Returns the new version.
    """
    logger.debug("update: id=%d version=%d %r", auto_id, version, auto)

    with transaction(db):
        current = db.get(Auto, auto_id, populate_existing=True)
        if current is None:
            raise AutoNotFound(auto_id)

        _check_fahrgestellnummer(db, auto.fahrgestellnummer, own_id=auto_id)

        if current.version != version:
            logger.warning(
                "Version conflict: id=%d expected=%d current=%d", auto_id, version, current.version
            )
            raise VersionConflict(auto_id, version)

        statement = (
            sql_update(Auto)
            .where(Auto.id == auto_id, Auto.version == version)
            .values(
                fahrgestellnummer=auto.fahrgestellnummer,
                art=auto.art,
                preis=auto.preis,
                lieferbar=auto.lieferbar,
                datum=auto.datum,
                aktualisiert=_now(),
                version=Auto.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = db.execute(statement)
        except IntegrityError as exc:
            if not _is_fahrgestellnummer_violation(exc):
                raise
            logger.warning("Duplicate fahrgestellnummer at update: value=%s", auto.fahrgestellnummer)
            raise DuplicateChassisNumber(auto.fahrgestellnummer) from exc

        if result.rowcount != 1:
            # The row moved on between our read and the UPDATE
            if db.scalar(select(Auto.id).where(Auto.id == auto_id)) is None:
                logger.warning("Auto deleted before write: id=%d", auto_id)
                raise AutoNotFound(auto_id)
            logger.warning("Version conflict at write: id=%d expected=%d", auto_id, version)
            raise VersionConflict(auto_id, version)

        db.expire(current)

    new_version = version + 1
    logger.debug("update: id=%d new version=%d", auto_id, new_version)
    return new_version


def delete(db: Session, auto_id: int) -> bool:
    """Delete an Auto and its children. Returns False if there was nothing to delete."""
    logger.debug("delete: id=%d", auto_id)

    with transaction(db):
        auto = db.get(Auto, auto_id)
        if auto is None:
            logger.debug("delete: no Auto for id=%d", auto_id)
            return False
        db.delete(auto)

    logger.debug("delete: id=%d performed", auto_id)
    return True
