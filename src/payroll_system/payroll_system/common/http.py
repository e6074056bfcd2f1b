from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request

from ..core.exceptions import NotFoundError, StaleSnapshotError, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_endpoint(view):
    """Map domain errors onto the JSON envelope.

    ValidationError -> 400, NotFoundError -> 404, StaleSnapshotError -> 409,
    anything else -> 500 with a generic message.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return fail(str(e), 400)
        except NotFoundError as e:
            return fail(str(e), 404)
        except StaleSnapshotError as e:
            logger.warning("stale snapshot on %s: %s", request.path, e)
            return fail(str(e), 409)
        except Exception:
            logger.exception("unhandled error on %s %s", request.method, request.path)
            return fail("Internal server error", 500)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_date(value, field_name: str = "Date") -> Optional[date]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format")


def optional_int(value, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def money(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None
