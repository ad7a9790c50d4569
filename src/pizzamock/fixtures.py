"""Seed data and in-memory resource collections for the mock backend.

Everything a simulator instance knows about users, the menu, franchises,
stores and orders lives in one ``ResourceFixtures`` object built from the
seeds below. Seeds are copied per instance, so handler mutations in one test
never leak into another.

Known demo-data gaps are named here rather than hidden in handlers:

- ``DEMO_FRANCHISEE_ID`` is the only user seeded as a franchise admin, so it
  is the only id for which ``GET /api/franchise/{userId}`` returns data.
- ``DEFAULT_ORDER_HISTORY`` is a canned page; it is not a ledger of the
  orders placed during the run.
"""

from __future__ import annotations

import copy
import random
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Final

from pizzamock.exceptions import ConfigurationError
from pizzamock.logging import get_logger

LOG = get_logger(__name__)


def wire_id(user_id: str) -> int | str:
    """Render a user id as a JSON number when it is all digits, else unchanged."""
    return int(user_id) if user_id.isascii() and user_id.isdigit() else user_id


class Role(StrEnum):
    """Roles a storefront user can hold. Values match the wire format."""

    DINER = "diner"
    FRANCHISEE = "franchisee"
    ADMIN = "admin"


@dataclass
class User:
    """A storefront account. ``email`` is the unique key."""

    id: str
    name: str
    email: str
    password: str
    roles: list[Role] = field(default_factory=lambda: [Role.DINER])

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def to_dict(self) -> dict[str, Any]:
        """Full record, as echoed by login, ``/api/user/me`` and user update."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password": self.password,
            "roles": [{"role": role.value} for role in self.roles],
        }

    def public_dict(self) -> dict[str, Any]:
        """Record without the password. All-digit ids are rendered as numbers.

        Used by registration and the user listing.
        """
        return {
            "id": wire_id(self.id),
            "name": self.name,
            "email": self.email,
            "roles": [{"role": role.value} for role in self.roles],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> User:
        """Build a user from the ``{role: ...}`` wire shape or plain role names."""
        roles: list[Role] = []
        for entry in data.get("roles") or [Role.DINER]:
            value = entry.get("role") if isinstance(entry, Mapping) else entry
            try:
                roles.append(Role(str(value).lower()))
            except ValueError as exc:
                raise ConfigurationError(f"Unknown role {value!r} for {data.get('email')}") from exc
        return cls(
            id=str(data["id"]),
            name=data["name"],
            email=data["email"],
            password=data["password"],
            roles=roles,
        )


@dataclass
class Store:
    id: int
    name: str
    total_revenue: float = 0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "totalRevenue": self.total_revenue}


@dataclass
class FranchiseAdmin:
    id: int | str
    name: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class Franchise:
    id: int
    name: str
    admins: list[FranchiseAdmin] = field(default_factory=list)
    stores: list[Store] = field(default_factory=list)

    def is_administered_by(self, user_id: str) -> bool:
        return any(str(admin.id) == str(user_id) for admin in self.admins)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "admins": [admin.to_dict() for admin in self.admins],
            "stores": [store.to_dict() for store in self.stores],
        }


@dataclass(frozen=True)
class MenuItem:
    id: int
    title: str
    price: float
    description: str
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "description": self.description,
        }
        if self.image is not None:
            data["image"] = self.image
        return data


@dataclass(frozen=True)
class OrderItem:
    id: int
    menu_id: int
    description: str
    price: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "menuId": self.menu_id,
            "description": self.description,
            "price": self.price,
        }


@dataclass(frozen=True)
class Order:
    id: int
    franchise_id: int
    store_id: int
    date: str
    items: tuple[OrderItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "franchiseId": self.franchise_id,
            "storeId": self.store_id,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
        }


# ---------------------------------------------------------------------------
# Seeds
# ---------------------------------------------------------------------------

DEMO_PASSWORD: Final[str] = "a"
DEMO_NAME: Final[str] = "Kai Chen"

# User id of the one seeded franchise admin (LotaPizza).
DEMO_FRANCHISEE_ID: Final[str] = "4"

# Placeholder settlement JWT returned with every placed order.
SETTLEMENT_TOKEN: Final[str] = "eyJpYXQ"

DEFAULT_USERS: Final[tuple[User, ...]] = (
    User(id="3", name=DEMO_NAME, email="d@jwt.com", password=DEMO_PASSWORD, roles=[Role.DINER]),
    User(
        id=DEMO_FRANCHISEE_ID,
        name=DEMO_NAME,
        email="f@jwt.com",
        password=DEMO_PASSWORD,
        roles=[Role.FRANCHISEE],
    ),
    User(id="5", name=DEMO_NAME, email="a@jwt.com", password=DEMO_PASSWORD, roles=[Role.ADMIN]),
)

DEFAULT_MENU: Final[tuple[MenuItem, ...]] = (
    MenuItem(1, "Veggie", 0.0038, "A garden of delight", "pizza1.png"),
    MenuItem(2, "Pepperoni", 0.0042, "Spicy treat", "pizza2.png"),
)

DEFAULT_FRANCHISES: Final[tuple[Franchise, ...]] = (
    Franchise(
        id=2,
        name="LotaPizza",
        admins=[FranchiseAdmin(int(DEMO_FRANCHISEE_ID), DEMO_NAME, "f@jwt.com")],
        stores=[Store(4, "Lehi"), Store(5, "Springville"), Store(6, "American Fork")],
    ),
    Franchise(id=3, name="PizzaCorp", stores=[Store(7, "Spanish Fork")]),
    Franchise(id=4, name="topSpot"),
)

DEFAULT_ORDER_HISTORY: Final[dict[str, Any]] = {
    "dinerId": 416,
    "orders": [
        Order(
            id=15,
            franchise_id=52,
            store_id=5,
            date="2025-10-07T23:12:10.000Z",
            items=(
                OrderItem(28, 1, "Veggie", 0.0038),
                OrderItem(29, 2, "Pepperoni", 0.0042),
                OrderItem(30, 3, "Margarita", 0.0042),
            ),
        ).to_dict()
    ],
    "page": 1,
}

_RANDOM_ID_CEILING: Final[int] = 1000


class IdAllocator:
    """Hands out integer ids not currently used within a collection.

    ``random`` draws from 0-999 and retries on collision, falling back to
    ``max + 1`` once the range is exhausted. ``sequential`` always uses
    ``max + 1``.
    """

    def __init__(self, strategy: str = "random", seed: int | None = None) -> None:
        if strategy not in ("random", "sequential"):
            raise ConfigurationError(f"Unsupported id strategy: {strategy}")
        self.strategy = strategy
        self._rng = random.Random(seed)

    def allocate(self, used: Iterable[int]) -> int:
        taken = set(used)
        if self.strategy == "random" and len(taken) < _RANDOM_ID_CEILING:
            while True:
                candidate = self._rng.randrange(_RANDOM_ID_CEILING)
                if candidate not in taken:
                    return candidate
        return max(taken, default=0) + 1


UserSeed = Iterable[User | Mapping[str, Any]] | Mapping[str, User | Mapping[str, Any]]


def _coerce_users(users: UserSeed) -> dict[str, User]:
    values = users.values() if isinstance(users, Mapping) else users
    by_email: dict[str, User] = {}
    for value in values:
        user = copy.deepcopy(value) if isinstance(value, User) else User.from_dict(value)
        if user.email in by_email:
            raise ConfigurationError(f"Duplicate seed email: {user.email}")
        by_email[user.email] = user
    return by_email


class ResourceFixtures:
    """Mutable per-simulator copy of the backend's records.

    Args:
        users: Valid accounts for this run. Accepts ``User`` objects or dicts in
            the wire shape, either as a sequence or keyed by email. Defaults to
            ``DEFAULT_USERS``.
        id_allocator: Allocator for new store, franchise, order and user ids.
    """

    def __init__(
        self,
        users: UserSeed | None = None,
        id_allocator: IdAllocator | None = None,
    ) -> None:
        self._user_seed = DEFAULT_USERS if users is None else users
        self.ids = id_allocator or IdAllocator()
        self.reset()

    def reset(self) -> None:
        """Restore every collection to its seed state."""
        self.users: dict[str, User] = _coerce_users(self._user_seed)
        self.menu: list[MenuItem] = list(DEFAULT_MENU)
        self.franchises: list[Franchise] = copy.deepcopy(list(DEFAULT_FRANCHISES))
        self.placed_orders: list[dict[str, Any]] = []
        self.order_history: dict[str, Any] = copy.deepcopy(DEFAULT_ORDER_HISTORY)
        LOG.debug("fixtures_seeded", users=len(self.users), franchises=len(self.franchises))

    # Users

    def find_user(self, email: str) -> User | None:
        return self.users.get(email)

    def find_user_by_id(self, user_id: str | int) -> User | None:
        return next((u for u in self.users.values() if u.id == str(user_id)), None)

    def add_user(self, name: str, email: str, password: str, roles: list[Role] | None = None) -> User:
        used = [int(u.id) for u in self.users.values() if u.id.isdigit()]
        user = User(
            id=str(self.ids.allocate(used)),
            name=name,
            email=email,
            password=password,
            roles=list(roles or [Role.DINER]),
        )
        self.users[email] = user
        return user

    def rekey_user(self, user: User, old_email: str) -> None:
        """Move *user* to its current email after an email change."""
        if old_email != user.email:
            self.users.pop(old_email, None)
            self.users[user.email] = user

    def remove_user(self, user_id: str | int) -> User | None:
        user = self.find_user_by_id(user_id)
        if user is not None:
            del self.users[user.email]
        return user

    # Franchises and stores

    def find_franchise(self, franchise_id: int) -> Franchise | None:
        return next((f for f in self.franchises if f.id == franchise_id), None)

    def franchises_administered_by(self, user_id: str) -> list[Franchise]:
        return [f for f in self.franchises if f.is_administered_by(user_id)]

    def add_franchise(self, name: str, admins: list[FranchiseAdmin]) -> Franchise:
        franchise = Franchise(
            id=self.ids.allocate(f.id for f in self.franchises),
            name=name,
            admins=admins,
        )
        self.franchises.append(franchise)
        return franchise

    def remove_franchise(self, franchise_id: int) -> Franchise | None:
        franchise = self.find_franchise(franchise_id)
        if franchise is not None:
            self.franchises.remove(franchise)
        return franchise

    def _all_store_ids(self) -> list[int]:
        return [store.id for f in self.franchises for store in f.stores]

    def add_store(self, franchise_id: int, name: str) -> Store:
        """Create a store; it is attached to the franchise only if that franchise exists."""
        store = Store(id=self.ids.allocate(self._all_store_ids()), name=name)
        franchise = self.find_franchise(franchise_id)
        if franchise is not None:
            franchise.stores.append(store)
        return store

    def remove_store(self, franchise_id: int, store_id: int) -> Store | None:
        franchise = self.find_franchise(franchise_id)
        if franchise is None:
            return None
        store = next((s for s in franchise.stores if s.id == store_id), None)
        if store is not None:
            franchise.stores.remove(store)
        return store

    # Orders

    def record_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Echo *payload* with a fresh order id and keep it in the run's ledger."""
        used = [o["id"] for o in self.placed_orders]
        used.extend(o["id"] for o in self.order_history["orders"])
        order = {**payload, "id": self.ids.allocate(used)}
        self.placed_orders.append(order)
        return order
