# storefront/api/routers/admin.py
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from storefront.api.deps import get_notification_service
from storefront.data.database import get_db
from storefront.domain.errors import InvalidStatusError, NotFoundError, PersistenceError
from storefront.domain.schemas import (
    OrderOut,
    ProductIn,
    ProductOut,
    SizesUpdateIn,
    StatsResponse,
    StatusUpdateIn,
    UserDetailOut,
    UserRead,
)
from storefront.services.catalog_service import CatalogService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.stats_service import StatsService
from storefront.services.user_service import UserService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# autoryzacja admina jest po stronie warstwy sesji/auth przed tym routerem
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=StatsResponse)
def dashboard_stats(db: Session = Depends(get_db)):
    timestamp = datetime.now(timezone.utc)
    try:
        stats = StatsService(db).get_dashboard_stats()
    except Exception as e:
        logger.exception("Blad w stats API")
        body = StatsResponse(success=False, error=str(e), timestamp=timestamp)
        return JSONResponse(status_code=500, content=body.model_dump(mode="json"))
    return {"success": True, "stats": stats, "timestamp": timestamp}


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).create_product(payload)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("/products/{product_id}/sizes", response_model=ProductOut)
def update_sizes(product_id: int, payload: SizesUpdateIn, db: Session = Depends(get_db)):
    try:
        return CatalogService(db).set_sizes(product_id, payload.sizes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/products/{product_id}", status_code=204)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    try:
        CatalogService(db).delete_product(product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/orders", response_model=List[OrderOut])
def list_orders(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
):
    return OrderService(db, notification_service).list_all_orders()


@router.get("/orders/{order_id}", response_model=OrderOut)
def order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
):
    try:
        return OrderService(db, notification_service).get_order_admin(order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
):
    try:
        return OrderService(db, notification_service).update_status(order_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidStatusError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/users", response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.get("/users/{user_id}", response_model=UserDetailOut)
def user_detail(user_id: int, db: Session = Depends(get_db)):
    try:
        return UserService(db).user_detail(user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
