#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service, get_notification_service
from storefront.data.database import get_db
from storefront.domain.errors import (
    CartBusyError,
    CartConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidVariantError,
    NotFoundError,
    PersistenceError,
)
from storefront.domain.schemas import (
    CartCountOut,
    CartOut,
    ItemIn,
    LineKeyIn,
    OrderOut,
    SetQuantityIn,
)
from storefront.services.cart_service import CartService, LineKey
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService

router = APIRouter(prefix="/carts", tags=["carts"])


def get_service(db: Session, lock_service: LockService):
    return CartService(db=db, lock_service=lock_service)


@router.get("/", response_model=CartOut)
def view_cart(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return get_service(db, lock_service).view(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/count", response_model=CartCountOut)
def cart_count(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return {"count": get_service(db, lock_service).count(user_id)}
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return svc.add_item(
            user_id=user_id,
            product_id=payload.product_id,
            size=payload.size,
            color=payload.color,
            quantity=payload.quantity,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartBusyError, CartConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except InvalidQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/items", response_model=CartOut)
def remove_item(
    payload: LineKeyIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        return svc.remove_item(user_id, payload.product_id, payload.size, payload.color)
    except (CartBusyError, CartConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.patch("/items", response_model=CartOut)
def set_quantity(
    payload: SetQuantityIn,
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    key = LineKey(payload.product_id, payload.size, payload.color)
    try:
        return svc.set_quantity(user_id, key, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartBusyError, CartConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except InvalidQuantityError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/checkout", response_model=OrderOut, status_code=201)
def checkout(
    user_id: int = Query(...),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
    notification_service: NotificationService = Depends(get_notification_service),
):
    """
    Zamienia koszyk na zamowienie i zmniejsza stan magazynowy.
    Przy braku stanu nic nie jest zmieniane, koszyk zostaje jak byl.
    """
    svc = CheckoutService(db, lock_service, notification_service)
    try:
        return svc.checkout(user_id)
    except InsufficientStockError as e:
        raise HTTPException(status_code=409, detail={"message": str(e), **e.to_dict()})
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (CartBusyError, CartConflictError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except (EmptyCartError, InvalidVariantError) as e:
        raise HTTPException(status_code=400, detail=str(e))
