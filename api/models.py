"""
API request and response models for the inventory REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py and
inventory/models.py, which own the internal domain representation. Route
handlers map between the two.

Request fields are Optional on purpose: a missing field must reach the
domain layer and come back as a 400 "required" error, not be rejected by
FastAPI's schema check with a different shape. Type errors (e.g. a string
price) still fail schema validation and are mapped to 400 in api/main.py.

Wire names follow the existing client: camelCase on the auth endpoints
(userId, isAdmin), snake_case on products (user_id, user_name, created_at).
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from inventory.models import Product, ProductFields

# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class SignupRequest(BaseModel):
    """Request body for POST /api/auth/signup."""

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: Optional[str] = None
    password: Optional[str] = None


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class SignupResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    userId: int


class LoginResponse(BaseModel):
    """Response for POST /api/auth/login. The token goes in Authorization: Bearer."""

    model_config = ConfigDict(frozen=True)

    token: str
    userId: int
    isAdmin: bool
    name: str


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductRequest(BaseModel):
    """Request body for POST /api/products and PUT /api/products/{id}.

    Any id / user_id keys a client sends are ignored (extra="ignore"); the
    owner always comes from the caller's token.
    """

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    # Strict so JSON true/false is not coerced to 1/0.
    price: Optional[Union[StrictInt, StrictFloat]] = None
    quantity: Optional[StrictInt] = None

    def to_fields(self) -> ProductFields:
        return ProductFields(
            name=self.name,
            description=self.description,
            price=self.price,
            quantity=self.quantity,
        )


class ProductResponse(BaseModel):
    """One product as returned by every product endpoint."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str
    price: float
    quantity: int
    user_id: Optional[int]
    user_name: Optional[str] = None
    created_at: str

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            quantity=product.quantity,
            user_id=product.owner_user_id,
            user_name=product.owner_name,
            created_at=product.created_at,
        )


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """{"message": ...} -- used for deletes and for every error body."""

    model_config = ConfigDict(frozen=True)

    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned on 4xx/5xx responses.

    error carries the raw exception text and is only populated in debug mode.
    """

    model_config = ConfigDict(frozen=True)

    message: str
    error: Optional[str] = Field(default=None)


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    timestamp: str
