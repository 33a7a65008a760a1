from datetime import datetime

from sqlalchemy import select, func
from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def list_users(self) -> list[UserModel]:
        return list(
            self.db.execute(
                select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id.desc())
            ).scalars().all()
        )

    def count_users(self) -> int:
        return self.db.execute(select(func.count(UserModel.id))).scalar_one()

    def count_created_since(self, since: datetime) -> int:
        return self.db.execute(
            select(func.count(UserModel.id)).where(UserModel.created_at >= since)
        ).scalar_one()
