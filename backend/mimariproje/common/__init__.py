"""Common data models and utilities for the application."""

from .api_response import ApiResponse
from .identifiers import generate_id, random_suffix
from .navigation import EXPIRED_LOGIN_ROUTE, HOME_ROUTE, LOGIN_ROUTE, HistoryNavigator, Navigator
from .timestamps import epoch_millis, utc_timestamp
from .user import User, UserType

__all__ = [
    "EXPIRED_LOGIN_ROUTE",
    "HOME_ROUTE",
    "LOGIN_ROUTE",
    "ApiResponse",
    "HistoryNavigator",
    "Navigator",
    "User",
    "UserType",
    "epoch_millis",
    "generate_id",
    "random_suffix",
    "utc_timestamp",
]
