"""
inventory/models.py -- Domain dataclasses for the product inventory.

These are pure data containers with zero logic. Validation and the
ownership check live in inventory/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Product:
    """A stocked product.

    owner_user_id is set once at creation to the creating user and never
    changes. It can point at a user row that no longer exists; owner_name is
    then None. owner_name is filled by the store's join on users, it is not
    a column of the products table.

    id and created_at are assigned by the store on insert.
    """

    name: str
    description: str
    price: float  # >= 0, two decimal places
    quantity: int  # >= 0
    id: Optional[int] = None
    owner_user_id: Optional[int] = None
    owner_name: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class ProductFields:
    """The client-editable part of a product, as submitted.

    Every field is Optional because this is raw input: the store rejects a
    ProductFields with anything missing. Owner, id and created_at are
    deliberately absent -- clients can never set them.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
