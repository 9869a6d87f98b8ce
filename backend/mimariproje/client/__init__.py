"""Client-side access to the marketplace backend."""

from .api_client import ApiClient
from .auth_api import AuthApi, RegisterData
from .resources import FavoritesApi, JobsApi, ProjectsApi, TransactionsApi, with_query

__all__ = [
    "ApiClient",
    "AuthApi",
    "FavoritesApi",
    "JobsApi",
    "ProjectsApi",
    "RegisterData",
    "TransactionsApi",
    "with_query",
]
