import logging
import re
from typing import Any, List, Mapping, Optional

from sqlalchemy.orm import Session

from autokatalog.models import Auto
from autokatalog.services.criteria import build_query, normalize_criteria
from autokatalog.services.exceptions import AutoNotFound, NoMatches

logger = logging.getLogger(__name__)

ID_PATTERN = re.compile(r"^[1-9][0-9]*$")


def parse_id(text: str) -> Optional[int]:
    """Return the identifier encoded in ``text`` or None if it is not a positive integer."""
    if text is None or not ID_PATTERN.fullmatch(text):
        return None
    return int(text)


def find_by_id(db: Session, auto_id: int) -> Auto:
    logger.debug("find_by_id: id=%d", auto_id)
    auto = db.get(Auto, auto_id)
    if auto is None:
        logger.debug("find_by_id: no Auto for id=%d", auto_id)
        raise AutoNotFound(auto_id)

    logger.debug("find_by_id: %r bezeichnung=%s", auto, auto.bezeichnung and auto.bezeichnung.bezeichnung)
    return auto


def find(db: Session, criteria: Optional[Mapping[str, Any]] = None) -> List[Auto]:
    """Return the Autos matching ``criteria``, all Autos if it is empty.

    An empty result is only an error for a title search: an unmatched free text
    raises NoMatches, while an unmatched exact filter is a normal empty list.
    """
    active = normalize_criteria(criteria)
    logger.debug("find: criteria=%s", active)

    autos = db.scalars(build_query(active)).unique().all()

    if not autos and "bezeichnung" in active:
        logger.debug("find: title fragment %r matched nothing", active["bezeichnung"])
        raise NoMatches(active["bezeichnung"])

    logger.debug("find: %d Autos", len(autos))
    return list(autos)
