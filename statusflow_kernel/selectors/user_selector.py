"""UserSelector -- read access to users."""

from __future__ import annotations

from sqlalchemy import select

from statusflow_kernel.domain.project import User
from statusflow_kernel.models.user import UserModel
from statusflow_kernel.selectors.base import BaseSelector


class UserSelector(BaseSelector[UserModel]):

    def get(self, user_id: str) -> User | None:
        model = self.session.get(UserModel, user_id)
        return model.to_dto() if model is not None else None

    def list_all(self) -> list[User]:
        stmt = select(UserModel).order_by(UserModel.name, UserModel.id)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def name_lookup(self) -> dict[str, str]:
        """user id -> display name, for describe_transition_requirements."""
        stmt = select(UserModel.id, UserModel.name)
        return {row.id: row.name for row in self.session.execute(stmt)}
