from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.errors import UserNotFoundError
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import OrderOut, UserCreate, UserDetailOut, UserRead


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)
        self.orders = OrderRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = UserModel(id=payload.id, name=payload.name, email=payload.email)
        created = self.repo.create_user(user)
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return UserRead.model_validate(user)

    def list_users(self) -> list[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_users()]

    def user_detail(self, user_id: int) -> UserDetailOut:
        """Uzytkownik razem z jego zamowieniami (najnowsze pierwsze), widok admina."""
        user = self.get_user(user_id)
        orders = self.orders.list_orders_by_user(user_id)
        return UserDetailOut(
            user=user,
            orders=[OrderOut.model_validate(o) for o in orders],
        )
