"""
inventory/store.py -- SQLAlchemy-backed product repository.

Uses SQLAlchemy Core (not ORM) so the dataclasses in inventory/models.py
remain the authoritative domain representation. Swapping SQLite for
PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. ProductStore is the repository;
_row_to_product is the mapper. Route handlers never touch SQL directly.

Write paths take the caller's Identity explicitly and apply the checks in a
fixed order:
  1. existence      -> NotFound   (always first, even for admins)
  2. ownership      -> Forbidden  (auth.guard.can_mutate)
  3. field validity -> ValidationError

Each write is a single statement. Concurrent writers to one row race in the
database with last-write-wins semantics; there is no locking or retry here.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ProductStore("sqlite:///inventory.db")
    product = store.create_product(identity, ProductFields(name="Widget", description="Blue", price=9.5, quantity=3))
    products = store.list_products()
    store.update_product(identity, product.id, ProductFields(...))
    store.delete_product(identity, product.id)
    store.close()
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Numeric, String, Table, Text, create_engine, event, select
from sqlalchemy.engine import Engine

from auth.guard import can_mutate
from auth.models import Identity
from core.config import DEFAULT_DB_URL
from core.errors import Forbidden, NotFound, ValidationError
from inventory.models import Product, ProductFields

logger = logging.getLogger("inventory.products")

# Signed 64-bit INTEGER range shared by SQLite and PostgreSQL BIGINT.
MAX_INTEGER = 2**63 - 1
# Numeric(10, 2) holds at most eight integer digits.
MAX_PRICE = 10**8

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

# The users table is owned by auth/store.py. This read-only stub only names
# the columns the owner-name join needs; it is never created from here.
_users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100)),
)

_products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("description", Text),
    Column("price", Numeric(10, 2, asdecimal=False), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("user_id", Integer, ForeignKey("users.id")),  # no cascade; may dangle
    Column("created_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _is_number(value) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def _is_row_id(value: int) -> bool:
    return -MAX_INTEGER - 1 <= value <= MAX_INTEGER


def validate_fields(fields: ProductFields) -> ProductFields:
    """Return a normalized copy of fields, or raise ValidationError.

    All four fields are required; name and description must be non-blank.
    price is rounded to two decimal places. Zero is a valid price and a
    valid quantity; negatives are not. Infinity and NaN are not numbers
    here, and both values must fit their columns.
    """
    name = fields.name.strip() if isinstance(fields.name, str) else ""
    description = fields.description.strip() if isinstance(fields.description, str) else ""
    if not name or not description or fields.price is None or fields.quantity is None:
        raise ValidationError("Name, description, price, and quantity are required")
    if not _is_number(fields.price):
        raise ValidationError("Price must be a number")
    if not isinstance(fields.quantity, int) or isinstance(fields.quantity, bool):
        raise ValidationError("Quantity must be an integer")
    if fields.price < 0:
        raise ValidationError("Price must be zero or greater")
    if fields.quantity < 0:
        raise ValidationError("Quantity must be zero or greater")
    if fields.quantity > MAX_INTEGER:
        raise ValidationError("Quantity is too large")
    # Compare before float() so a huge int cannot overflow the conversion.
    price = round(float(fields.price), 2) if fields.price < MAX_PRICE else MAX_PRICE
    if price >= MAX_PRICE:
        raise ValidationError("Price must be less than 100000000")
    return ProductFields(
        name=name,
        description=description,
        price=price,
        quantity=fields.quantity,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ProductStore:
    """Repository for Product entities.

    Expects the users table to exist already (UserStore creates it), so in
    the app the UserStore is always constructed first on the same URL.
    """

    def __init__(self, db_url: str = DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine, tables=[_products])

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _select_with_owner(self):
        return select(_products, _users.c.name.label("user_name")).select_from(
            _products.outerjoin(_users, _products.c.user_id == _users.c.id)
        )

    def list_products(self) -> list[Product]:
        """Return every product, newest first, with the owner's name.

        Not filtered by caller -- the inventory is global.
        """
        stmt = self._select_with_owner().order_by(_products.c.created_at.desc(), _products.c.id.desc())
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_product(r) for r in rows]

    def get_product(self, product_id: int) -> Optional[Product]:
        if not _is_row_id(product_id):
            return None
        stmt = self._select_with_owner().where(_products.c.id == product_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).fetchone()
        return _row_to_product(row) if row is not None else None

    def _require_owner(self, product_id: int) -> Optional[int]:
        """Return the product's owner id (possibly None). Raises NotFound if absent."""
        if not _is_row_id(product_id):
            raise NotFound()
        with self.engine.connect() as conn:
            row = conn.execute(select(_products.c.user_id).where(_products.c.id == product_id)).fetchone()
        if row is None:
            raise NotFound()
        return row.user_id

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_product(self, identity: Identity, fields: ProductFields) -> Product:
        """Insert a product owned by the caller and return it.

        The owner is always identity.user_id; id and created_at come from
        the store.
        """
        clean = validate_fields(fields)
        with self.engine.connect() as conn:
            result = conn.execute(
                _products.insert().values(
                    name=clean.name,
                    description=clean.description,
                    price=clean.price,
                    quantity=clean.quantity,
                    user_id=identity.user_id,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            product_id = result.inserted_primary_key[0]
        logger.info("Product %d created by user %d", product_id, identity.user_id)
        return self.get_product(product_id)

    def update_product(self, identity: Identity, product_id: int, fields: ProductFields) -> Product:
        """Overwrite name, description, price and quantity of an existing product.

        Owner, id and created_at are never touched.
        """
        owner_id = self._require_owner(product_id)
        if not can_mutate(identity, owner_id):
            raise Forbidden("Not authorized to edit this product")
        clean = validate_fields(fields)
        with self.engine.connect() as conn:
            result = conn.execute(
                _products.update()
                .where(_products.c.id == product_id)
                .values(
                    name=clean.name,
                    description=clean.description,
                    price=clean.price,
                    quantity=clean.quantity,
                )
            )
            conn.commit()
        if result.rowcount == 0:
            # Deleted by a concurrent request after the existence check.
            raise NotFound()
        logger.info("Product %d updated by user %d", product_id, identity.user_id)
        updated = self.get_product(product_id)
        if updated is None:
            raise NotFound()
        return updated

    def delete_product(self, identity: Identity, product_id: int) -> None:
        owner_id = self._require_owner(product_id)
        if not can_mutate(identity, owner_id):
            raise Forbidden("Not authorized to delete this product")
        with self.engine.connect() as conn:
            result = conn.execute(_products.delete().where(_products.c.id == product_id))
            conn.commit()
        if result.rowcount == 0:
            raise NotFound()
        logger.info("Product %d deleted by user %d", product_id, identity.user_id)

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_product(row) -> Product:
    return Product(
        id=row.id,
        name=row.name,
        description=row.description or "",
        price=float(row.price),
        quantity=row.quantity,
        owner_user_id=row.user_id,
        owner_name=row.user_name,
        created_at=row.created_at,
    )
