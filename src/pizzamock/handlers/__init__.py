"""Resource handlers answering the storefront's API calls."""

from pizzamock.handlers.auth import AuthHandler, LegacyLogoutHandler
from pizzamock.handlers.base import ResourceHandler
from pizzamock.handlers.franchises import (
    FranchiseCollectionHandler,
    FranchiseeHandler,
    FranchiseHandler,
    StoreCollectionHandler,
    StoreHandler,
)
from pizzamock.handlers.menu import MenuHandler
from pizzamock.handlers.orders import OrderHandler
from pizzamock.handlers.users import CurrentUserHandler, UserHandler, UserListHandler

__all__ = [
    "ResourceHandler",
    "AuthHandler",
    "LegacyLogoutHandler",
    "CurrentUserHandler",
    "UserHandler",
    "UserListHandler",
    "MenuHandler",
    "FranchiseCollectionHandler",
    "FranchiseHandler",
    "FranchiseeHandler",
    "StoreCollectionHandler",
    "StoreHandler",
    "OrderHandler",
]
