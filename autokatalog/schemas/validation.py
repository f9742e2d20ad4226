"""
Field validation for incoming Auto payloads.

Each function takes the raw JSON body and returns a list of messages, one per
violated field, prefixed with the field path (``art ...``, ``preis ...``,
``bezeichnung.bezeichnung ...``, ``zubehoere[0].name ...``) and in field order.
An empty list means the payload can be turned into a DTO.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Mapping

from autokatalog.models import AutoArt
from autokatalog.schemas.auto import AutoDTO, AutoUpdateDTO
from autokatalog.services.exceptions import ValidationFailed

ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MAX_BEZEICHNUNG = 40
MAX_ZUBEHOER = 32

ART_CHOICES = [art.value for art in AutoArt]


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _check_optional_text(messages: List[str], path: str, value: Any, max_length: int) -> None:
    if value is None:
        return
    if not isinstance(value, str):
        messages.append(f"{path} must be a string")
    elif len(value) > max_length:
        messages.append(f"{path} must have at most {max_length} characters")


def _check_required_text(messages: List[str], path: str, value: Any, max_length: int) -> None:
    if not _is_text(value):
        messages.append(f"{path} is required")
    elif len(value) > max_length:
        messages.append(f"{path} must have at most {max_length} characters")


def _is_iso_date(value: Any) -> bool:
    if isinstance(value, date) and not isinstance(value, datetime):
        return True
    if not isinstance(value, str) or not ISO_DATE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_auto_update(data: Any) -> List[str]:
    """Validate the root fields of an Auto."""
    if not isinstance(data, Mapping):
        return ["body must be a JSON object"]

    messages: List[str] = []

    if not _is_text(data.get("fahrgestellnummer")):
        messages.append("fahrgestellnummer is required")

    art = data.get("art")
    if art is not None and art not in ART_CHOICES:
        messages.append(f"art must be one of {', '.join(ART_CHOICES)}")

    preis = data.get("preis")
    if isinstance(preis, bool) or not isinstance(preis, (int, float, Decimal)) or not preis > 0:
        messages.append("preis must be a positive number")

    lieferbar = data.get("lieferbar")
    if lieferbar is not None and not isinstance(lieferbar, bool):
        messages.append("lieferbar must be a boolean")

    datum = data.get("datum")
    if datum is not None and not _is_iso_date(datum):
        messages.append("datum must be an ISO-8601 date (YYYY-MM-DD)")

    return messages


def validate_auto(data: Any) -> List[str]:
    """Validate a complete Auto including Bezeichnung and Zubehoer."""
    messages = validate_auto_update(data)
    if not isinstance(data, Mapping):
        return messages

    bezeichnung = data.get("bezeichnung")
    if not isinstance(bezeichnung, Mapping):
        messages.append("bezeichnung is required")
    else:
        _check_required_text(messages, "bezeichnung.bezeichnung", bezeichnung.get("bezeichnung"), MAX_BEZEICHNUNG)
        _check_optional_text(messages, "bezeichnung.zusatz", bezeichnung.get("zusatz"), MAX_BEZEICHNUNG)

    zubehoere = data.get("zubehoere")
    if zubehoere is not None:
        if not isinstance(zubehoere, list):
            messages.append("zubehoere must be a list")
        else:
            for index, zubehoer in enumerate(zubehoere):
                path = f"zubehoere[{index}]"
                if not isinstance(zubehoer, Mapping):
                    messages.append(f"{path} must be an object")
                    continue
                _check_required_text(messages, f"{path}.name", zubehoer.get("name"), MAX_ZUBEHOER)
                _check_optional_text(messages, f"{path}.beschreibung", zubehoer.get("beschreibung"), MAX_ZUBEHOER)

    return messages


def parse_auto(data: Any) -> AutoDTO:
    messages = validate_auto(data)
    if messages:
        raise ValidationFailed(messages)
    return AutoDTO.model_validate(data)


def parse_auto_update(data: Any) -> AutoUpdateDTO:
    messages = validate_auto_update(data)
    if messages:
        raise ValidationFailed(messages)
    return AutoUpdateDTO.model_validate(data)
