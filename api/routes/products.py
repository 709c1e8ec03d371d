"""
api/routes/products.py -- Product inventory routes.

Routes:
  GET    /products               -- list all products, newest first
  POST   /products               -- create; caller becomes owner
  PUT    /products/{product_id}  -- replace name/description/price/quantity
  DELETE /products/{product_id}  -- remove

Every route requires a bearer token (router-level get_identity). Reads are
global; writes receive the Identity explicitly and ProductStore applies the
existence -> ownership -> validation checks, so a missing id is a 404 even
for admins and a non-owner gets a 403.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import SQLAlchemyError

from api.models import MessageResponse, ProductRequest, ProductResponse
from auth.dependencies import get_identity
from auth.models import Identity
from core.errors import StorageError
from inventory.store import ProductStore

# Router-level dependency: no product route is reachable without a valid token,
# even the ones that do not need the Identity themselves.
router = APIRouter(dependencies=[Depends(get_identity)])


@router.get("/products", response_model=list[ProductResponse])
def list_products(request: Request) -> list[ProductResponse]:
    """Return every product joined with its owner's name."""
    store: ProductStore = request.app.state.product_store
    try:
        products = store.list_products()
    except SQLAlchemyError as exc:
        raise StorageError("Error fetching products") from exc
    return [ProductResponse.from_product(p) for p in products]


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    request: Request,
    body: ProductRequest,
    identity: Identity = Depends(get_identity),
) -> ProductResponse:
    store: ProductStore = request.app.state.product_store
    try:
        product = store.create_product(identity, body.to_fields())
    except SQLAlchemyError as exc:
        raise StorageError("Error creating product") from exc
    return ProductResponse.from_product(product)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    request: Request,
    product_id: int,
    body: ProductRequest,
    identity: Identity = Depends(get_identity),
) -> ProductResponse:
    """Overwrite a product's editable fields. Owner or admin only."""
    store: ProductStore = request.app.state.product_store
    try:
        product = store.update_product(identity, product_id, body.to_fields())
    except SQLAlchemyError as exc:
        raise StorageError("Error updating product") from exc
    return ProductResponse.from_product(product)


@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(
    request: Request,
    product_id: int,
    identity: Identity = Depends(get_identity),
) -> MessageResponse:
    """Delete a product. Owner or admin only."""
    store: ProductStore = request.app.state.product_store
    try:
        store.delete_product(identity, product_id)
    except SQLAlchemyError as exc:
        raise StorageError("Error deleting product") from exc
    return MessageResponse(message="Product deleted successfully")
