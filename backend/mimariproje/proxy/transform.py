"""Reshaping of backend project records into what the front-end renders.

The backend may return partially populated project rows; the detail view
assumes every field below exists, so missing ones are filled with neutral
defaults. Emptiness follows JavaScript truthiness: ``None``, ``False``,
``0`` and ``""`` count as missing, empty lists and dicts do not.
"""

from __future__ import annotations

import copy
import logging
import math
from typing import Any

LOGGER = logging.getLogger(__name__)

PLACEHOLDER = "-"

DEFAULT_LICENSE: dict[str, str] = {
    "type": "Standart",
    "description": "Lisans bilgisi bulunamadı.",
    "modifications": PLACEHOLDER,
    "resale": PLACEHOLDER,
}


def _is_missing(value: Any) -> bool:
    if value is None or value is False or value == "":
        return True
    return isinstance(value, int | float) and not isinstance(value, bool) and value == 0


def default_specifications(area: Any = None) -> dict[str, Any]:
    """Return the specification block used when a project has none.

    :param area: The project's area, shown as total area when present
    """
    return {
        "totalArea": PLACEHOLDER if _is_missing(area) else area,
        "buildingArea": PLACEHOLDER,
        "gardenArea": PLACEHOLDER,
        "floors": PLACEHOLDER,
        "rooms": PLACEHOLDER,
        "bathrooms": PLACEHOLDER,
        "garage": PLACEHOLDER,
        "features": [],
    }


def to_number(value: str) -> int | float | None:
    """Convert a numeric string the way the front-end would.

    :return: An int for integral values, a float otherwise, None when not numeric
    """
    text = value.strip()
    if not text:
        return 0
    if "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def normalize_project(project: dict[str, Any]) -> dict[str, Any]:
    """Apply the field mapping and defaults to a single project record.

    :param project: Project record as returned by the backend
    :return: A new record; the input is left untouched
    """
    project = copy.deepcopy(project)

    project_images = project.get("project_images")
    if isinstance(project_images, list):
        project["images"] = [
            image.get("image_url") if isinstance(image, dict) else image
            for image in project_images
        ]
    elif not _is_missing(project_images):
        project["images"] = []
    else:
        project["images"] = project.get("images") or []

    if not _is_missing(project.get("users")) and _is_missing(project.get("user")):
        project["user"] = project["users"]

    price = project.get("price")
    if isinstance(price, str) and price:
        project["price"] = to_number(price)

    if _is_missing(project.get("specifications")):
        project["specifications"] = default_specifications(project.get("area"))
    for list_field in ("deliverables", "tags", "reviews"):
        if _is_missing(project.get(list_field)):
            project[list_field] = []
    if _is_missing(project.get("license")):
        project["license"] = dict(DEFAULT_LICENSE)

    return project


def normalize_project_detail(payload: Any) -> Any:
    """Normalize the project inside a successful detail envelope.

    Payloads that are not ``{"success": true, "data": {"project": {...}}}``
    are returned unchanged.

    :param payload: Parsed backend response body
    :return: The payload with its project normalized
    """
    if not isinstance(payload, dict) or not payload.get("success"):
        return payload
    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("project"), dict):
        return payload

    LOGGER.debug("Normalizing project %s", data["project"].get("id"))
    return {**payload, "data": {**data, "project": normalize_project(data["project"])}}
