"""Request and response models of the proxy routes."""

import json
import logging
import math
import re
from typing import Any

from pydantic import BaseModel, Field

LOGGER = logging.getLogger(__name__)


_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_price(price: str) -> float:
    """Read the leading number of ``price``, so ``"150000 TL"`` is 150000; 0 when none."""
    match = _LEADING_NUMBER.match(price)
    if match is None:
        return 0
    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return 0
    return value


class ProjectForm(BaseModel):
    """Form fields accepted by ``POST /api/projects``.

    All fields are optional at the parsing level; required ones are checked
    by the route so the error body matches the rest of the proxy.
    """

    title: str | None = None
    description: str | None = None
    category: str | None = None
    price: str | None = None
    location: str | None = None
    area: str | None = None
    style: str | None = None
    specializations: str | None = None

    def has_required_fields(self) -> bool:
        return all((self.title, self.description, self.category, self.price))

    def to_backend_payload(self) -> dict[str, Any]:
        """Build the JSON body sent to the backend.

        Optional fields are only included when they carry text. An invalid
        ``specializations`` JSON document yields an empty tag list.
        """
        payload: dict[str, Any] = {
            "title": (self.title or "").strip(),
            "description": (self.description or "").strip(),
            "category": (self.category or "").strip(),
            "price": _parse_price(self.price or ""),
        }

        if self.location and self.location.strip():
            payload["location"] = self.location.strip()
        if self.area and self.area.strip():
            payload["area"] = str(self.area)
        if self.style and self.style.strip():
            payload["style"] = self.style.strip()
        if self.specializations:
            try:
                payload["tags"] = json.loads(self.specializations)
            except ValueError:
                LOGGER.debug("Ignoring malformed specializations: %r", self.specializations)
                payload["tags"] = []

        return payload


class HealthStatus(BaseModel):
    """Health answer used when the backend cannot confirm its own health."""

    status: str = "success"
    message: str = "Frontend API çalışıyor"
    frontend: str = "OK"
    backend_connection: str = "FAILED"
    fallback_mode: bool


class ErrorReport(BaseModel):
    """Client-side error report sent by the error boundary."""

    error_id: str = Field(alias="errorId")
    message: str
    stack: str | None = None
    component_stack: str | None = Field(default=None, alias="componentStack")
    timestamp: str
    user_agent: str | None = Field(default=None, alias="userAgent")
    url: str | None = None

    model_config = {"populate_by_name": True}


class ErrorReceipt(BaseModel):
    """Acknowledgement returned for an accepted error report."""

    received: bool = True
    error_id: str
