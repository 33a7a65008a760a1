# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import ProductOut, QuickviewOut, RelatedOut, StockOut
from storefront.services.catalog_service import CatalogService
from storefront.utils.settings import CATEGORY_LIMIT, FEATURED_LIMIT, NEW_ARRIVALS_LIMIT

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/featured", response_model=List[ProductOut])
def featured(limit: int = Query(FEATURED_LIMIT, gt=0, le=50), db: Session = Depends(get_db)):
    return CatalogService(db).list_featured(limit)


@router.get("/new-arrivals", response_model=List[ProductOut])
def new_arrivals(limit: int = Query(NEW_ARRIVALS_LIMIT, gt=0, le=50), db: Session = Depends(get_db)):
    return CatalogService(db).list_new_arrivals(limit)


@router.get("/category/{category}", response_model=List[ProductOut])
def by_category(category: str, limit: int = Query(CATEGORY_LIMIT, gt=0, le=100), db: Session = Depends(get_db)):
    return CatalogService(db).by_category(category, limit)


@router.get("/categories", response_model=List[str])
def categories(db: Session = Depends(get_db)):
    return CatalogService(db).distinct_categories()


@router.get("/brands", response_model=List[str])
def brands(db: Session = Depends(get_db)):
    return CatalogService(db).distinct_brands()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).get_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{product_id}/quickview", response_model=QuickviewOut)
def quickview(product_id: int, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).quickview(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{product_id}/related", response_model=RelatedOut)
def related(product_id: int, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).related(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{product_id}/stock/{size}", response_model=StockOut)
def stock(product_id: int, size: int, db: Session = Depends(get_db)):
    try:
        available = CatalogService(db).available_stock(product_id, size)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"product_id": product_id, "size": size, "available": available}
