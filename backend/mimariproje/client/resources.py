"""Thin wrappers over the backend's resource endpoints.

The backend owns projects, jobs, favorites and transactions; these wrappers
only build paths and query strings and hand back the raw ApiResponse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from mimariproje.common import ApiResponse

    from .api_client import ApiClient


def with_query(endpoint: str, params: dict[str, Any] | None = None) -> str:
    """Append the non-None ``params`` to ``endpoint`` as a query string.

    Booleans are rendered as ``true``/``false`` to match the backend's parser.

    :param endpoint: Path without a query string
    :param params: Query parameters, None values are dropped
    :return: The endpoint with its query string, if any
    """
    if not params:
        return endpoint

    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)

    if not cleaned:
        return endpoint
    return f"{endpoint}?{httpx.QueryParams(cleaned)}"


class _ResourceApi:
    def __init__(self, client: ApiClient) -> None:
        self.client = client


class ProjectsApi(_ResourceApi):
    """Project listings."""

    async def get_projects(self, **params: Any) -> ApiResponse:
        """List projects; accepts page, per_page, category, location, min_price, max_price, search."""
        return await self.client.get(with_query("/projects", params))

    async def get_project(self, project_id: int) -> ApiResponse:
        return await self.client.get(f"/projects/{project_id}")

    async def create_project(self, project_data: dict[str, Any]) -> ApiResponse:
        return await self.client.post("/projects", project_data)

    async def update_project(self, project_id: int, project_data: dict[str, Any]) -> ApiResponse:
        return await self.client.put(f"/projects/{project_id}", project_data)

    async def delete_project(self, project_id: int) -> ApiResponse:
        return await self.client.delete(f"/projects/{project_id}")

    async def get_my_projects(self) -> ApiResponse:
        return await self.client.get("/projects/my")

    async def like_project(self, project_id: int) -> ApiResponse:
        return await self.client.post(f"/projects/{project_id}/like")


class JobsApi(_ResourceApi):
    """Job postings and applications."""

    async def get_jobs(self, **params: Any) -> ApiResponse:
        """List jobs; accepts page, per_page, category, location, min_budget, max_budget, search."""
        return await self.client.get(with_query("/jobs", params))

    async def get_job(self, job_id: int) -> ApiResponse:
        return await self.client.get(f"/jobs/{job_id}")

    async def create_job(self, job_data: dict[str, Any]) -> ApiResponse:
        return await self.client.post("/jobs", job_data)

    async def apply_to_job(
        self,
        job_id: int,
        *,
        cover_letter: str,
        proposed_price: float,
        estimated_duration: str,
    ) -> ApiResponse:
        return await self.client.post(
            f"/jobs/{job_id}/apply",
            {
                "cover_letter": cover_letter,
                "proposed_price": proposed_price,
                "estimated_duration": estimated_duration,
            },
        )

    async def get_my_jobs(self) -> ApiResponse:
        return await self.client.get("/jobs/my")


class FavoritesApi(_ResourceApi):
    """Projects the user saved."""

    async def get_favorites(self) -> ApiResponse:
        return await self.client.get("/favorites")

    async def add_favorite(self, project_id: int) -> ApiResponse:
        return await self.client.post("/favorites", {"project_id": project_id})

    async def toggle_favorite(self, project_id: int) -> ApiResponse:
        return await self.client.post("/favorites/toggle", {"project_id": project_id})

    async def is_favorite(self, project_id: int) -> ApiResponse:
        return await self.client.get(f"/favorites/check/{project_id}")

    async def remove_favorite(self, project_id: int) -> ApiResponse:
        return await self.client.delete(f"/favorites/{project_id}")


class TransactionsApi(_ResourceApi):
    """Payment history."""

    async def get_history(
        self,
        *,
        status: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> ApiResponse:
        return await self.client.get(
            with_query(
                "/payments/history",
                {
                    "status": status,
                    "startDate": start_date,
                    "endDate": end_date,
                    "limit": limit,
                    "offset": offset,
                },
            ),
        )
