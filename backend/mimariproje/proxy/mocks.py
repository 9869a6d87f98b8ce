"""Hardcoded payloads served when the backend is unreachable in development."""

from __future__ import annotations

from typing import Any

from mimariproje.common import utc_timestamp

MOCK_PAGE_SIZE = 12


def mock_user() -> dict[str, Any]:
    """Return the demo account shown while the backend is down."""
    return {
        "id": 2,
        "email": "admin@mimariproje.com",
        "first_name": "Admin",
        "last_name": "User",
        "company_name": "Mimariproje",
        "user_type": "company",
        "profession": "Mimar",
        "phone": "+905551234567",
        "location": "İstanbul",
        "bio": "Admin kullanıcı",
        "avatar_url": "",
        "profile_image_url": "",
        "is_verified": True,
        "subscription_type": "premium",
        "created_at": utc_timestamp(),
        "full_name": "Admin User",
    }


def mock_projects() -> list[dict[str, Any]]:
    now = utc_timestamp()
    return [
        {
            "id": 1,
            "title": "Modern Villa Tasarımı",
            "description": "Lüks ve modern villa tasarımı",
            "category": "residential",
            "price": 150000.0,
            "location": "İstanbul, Beşiktaş",
            "area": 450.0,
            "style": "modern",
            "specializations": ["Villa", "Modern", "Lüks"],
            "images": [],
            "created_at": now,
            "updated_at": now,
            "user": mock_user(),
        },
    ]


def mock_projects_payload() -> dict[str, Any]:
    """Return a projects-list response with a single demo project."""
    projects = mock_projects()
    return {
        "projects": projects,
        "pagination": {
            "page": 1,
            "per_page": MOCK_PAGE_SIZE,
            "total": len(projects),
            "pages": 1,
            "has_next": False,
            "has_prev": False,
        },
    }


def mock_user_payload() -> dict[str, Any]:
    """Return a current-user response for the demo account."""
    return {"user": mock_user()}
