"""
Search criteria for Autos.

A criteria mapping is sparse: any subset of the recognized keys may be given,
unknown keys are ignored and ``None`` counts as absent. All given keys must
hold (logical AND). Without keys every Auto matches.

    fahrgestellnummer   exact, case-sensitive
    art                 exact, AutoArt or its value
    lieferbar           exact boolean
    bezeichnung         case-insensitive substring of the title
"""

import logging
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.sql import Select

from autokatalog.db import casefold
from autokatalog.models import Auto, AutoArt, Bezeichnung

logger = logging.getLogger(__name__)

RECOGNIZED_KEYS = ("fahrgestellnummer", "art", "lieferbar", "bezeichnung")

LIKE_ESCAPE = "\\"


def normalize_criteria(criteria: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    if not criteria:
        return {}
    return {key: criteria[key] for key in RECOGNIZED_KEYS if criteria.get(key) is not None}


def _escape_like(fragment: str) -> str:
    return (
        fragment.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_query(criteria: Optional[Mapping[str, Any]] = None) -> Select:
    """Translate criteria into a SELECT over Auto in storage order."""
    active = normalize_criteria(criteria)
    logger.debug("build_query: criteria=%s", active)

    query = select(Auto)

    if "fahrgestellnummer" in active:
        query = query.where(Auto.fahrgestellnummer == active["fahrgestellnummer"])

    if "art" in active:
        query = query.where(Auto.art == AutoArt(active["art"]))

    if "lieferbar" in active:
        query = query.where(Auto.lieferbar.is_(bool(active["lieferbar"])))

    if "bezeichnung" in active:
        pattern = f"%{_escape_like(str(active['bezeichnung']))}%"
        query = query.join(Bezeichnung, Bezeichnung.auto_id == Auto.id).where(
            casefold(Bezeichnung.bezeichnung).like(casefold(pattern), escape=LIKE_ESCAPE)
        )

    return query.order_by(Auto.id)
