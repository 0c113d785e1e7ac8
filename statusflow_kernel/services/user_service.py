"""Service layer for User operations."""

from __future__ import annotations

from statusflow_kernel.db.base import new_id
from statusflow_kernel.domain.project import User
from statusflow_kernel.domain.values import UserRole
from statusflow_kernel.exceptions import UserNotFoundError
from statusflow_kernel.logging_config import get_logger
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.services.base import BaseService

logger = get_logger("services.user")


class UserService(BaseService[UserModel]):

    def create_user(
        self,
        name: str,
        *,
        email: str = "",
        role: UserRole = UserRole.USER,
        user_id: str | None = None,
    ) -> User:
        now = self.clock.now()
        model = UserModel.from_dto(
            User(id=user_id or new_id(), name=name, email=email, role=role)
        )
        model.created_at = now
        model.updated_at = now
        self.session.add(model)
        self.session.flush()
        logger.info("user_created", extra={"user_id": model.id, "role": role.value})
        return model.to_dto()

    def set_role(self, user_id: str, role: UserRole) -> User:
        model = self.session.get(UserModel, user_id)
        if model is None:
            raise UserNotFoundError(user_id)
        model.role = role.value
        model.updated_at = self.clock.now()
        self.session.flush()
        return model.to_dto()
