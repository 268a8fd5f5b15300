"""Product catalog endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.backend.src.core.security import get_caller_identity
from app.backend.src.db import get_session_dependency
from app.backend.src.models import Product
from app.backend.src.schemas.product import ProductCreate, ProductRead
from app.backend.src.services import products as product_service

router = APIRouter(
    prefix="/products",
    tags=["products"],
    dependencies=[Depends(get_caller_identity)],
)

SessionDep = Annotated[Session, Depends(get_session_dependency)]


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, session: SessionDep) -> Product:
    """Create a product; names are unique."""

    return product_service.create_product(session, payload)


@router.get("", response_model=list[ProductRead])
def list_products(session: SessionDep) -> list[ProductRead]:
    return product_service.list_products(session)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, session: SessionDep) -> ProductRead:
    return product_service.get_product(session, product_id)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductCreate, session: SessionDep) -> Product:
    return product_service.update_product(session, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, session: SessionDep) -> None:
    product_service.delete_product(session, product_id)
