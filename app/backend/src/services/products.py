"""Product catalog: lookups for the invoice core plus CRUD."""

from __future__ import annotations

import structlog
from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from app.backend.src.core.errors import ProductAlreadyExists, ProductInUse, ProductNotFound
from app.backend.src.core.redis_cache import get_product_cache
from app.backend.src.models import Invoice, Product
from app.backend.src.schemas.product import ProductCreate, ProductRead

LOGGER = structlog.get_logger(__name__)

_ALL_KEY = "all"


def _by_id_key(product_id: int) -> str:
    return f"id:{product_id}"


def _get_product_or_404(session: Session, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        LOGGER.warning("product_not_found", product_id=product_id)
        raise ProductNotFound(product_id)
    return product


def _name_taken(session: Session, name: str) -> bool:
    return bool(session.execute(select(exists().where(Product.name == name))).scalar())


def get_product_by_name(session: Session, name: str) -> Product:
    """Return the product called ``name``; never served from cache."""

    product = session.execute(select(Product).where(Product.name == name)).scalar_one_or_none()
    if product is None:
        raise ProductNotFound(name)
    return product


def list_products(session: Session) -> list[ProductRead]:
    cache = get_product_cache()
    if cache is not None:
        cached = cache.get(_ALL_KEY)
        if cached is not None:
            return [ProductRead.model_validate(item) for item in cached]

    products = [
        ProductRead.model_validate(product)
        for product in session.execute(select(Product).order_by(Product.id)).scalars()
    ]
    if cache is not None:
        cache.set(_ALL_KEY, [product.model_dump(mode="json") for product in products])
    return products


def get_product(session: Session, product_id: int) -> ProductRead:
    cache = get_product_cache()
    if cache is not None:
        cached = cache.get(_by_id_key(product_id))
        if cached is not None:
            return ProductRead.model_validate(cached)

    product = ProductRead.model_validate(_get_product_or_404(session, product_id))
    if cache is not None:
        cache.set(_by_id_key(product_id), product.model_dump(mode="json"))
    return product


def create_product(session: Session, payload: ProductCreate) -> Product:
    if _name_taken(session, payload.name):
        LOGGER.warning("product_name_taken", name=payload.name)
        raise ProductAlreadyExists(payload.name)

    product = Product(name=payload.name, price=payload.price, description=payload.description)
    session.add(product)
    session.commit()
    session.refresh(product)

    cache = get_product_cache()
    if cache is not None:
        cache.evict(_ALL_KEY)
    LOGGER.info("product_created", product_id=product.id, name=product.name)
    return product


def update_product(session: Session, product_id: int, payload: ProductCreate) -> Product:
    product = _get_product_or_404(session, product_id)
    # Uniqueness only matters when the name actually changes.
    if product.name != payload.name and _name_taken(session, payload.name):
        LOGGER.warning("product_name_taken", name=payload.name)
        raise ProductAlreadyExists(payload.name)

    product.name = payload.name
    product.price = payload.price
    product.description = payload.description
    session.commit()
    session.refresh(product)

    cache = get_product_cache()
    if cache is not None:
        cache.evict(_ALL_KEY, _by_id_key(product_id))
    LOGGER.info("product_updated", product_id=product.id, name=product.name)
    return product


def delete_product(session: Session, product_id: int) -> None:
    product = _get_product_or_404(session, product_id)
    referenced = session.execute(
        select(exists().where(Invoice.product_id == product_id))
    ).scalar()
    if referenced:
        raise ProductInUse(product_id)

    session.delete(product)
    session.commit()

    cache = get_product_cache()
    if cache is not None:
        cache.clear()
    LOGGER.info("product_deleted", product_id=product_id)


__all__ = [
    "create_product",
    "delete_product",
    "get_product",
    "get_product_by_name",
    "list_products",
    "update_product",
]
