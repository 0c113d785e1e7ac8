"""
Module: statusflow_kernel.models.user
Responsibility: ORM persistence for application users.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - role is one of the UserRole values: ck_users_valid_role.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from statusflow_kernel.db.base import TrackedBase

if TYPE_CHECKING:
    from statusflow_kernel.domain.project import User


class UserModel(TrackedBase):
    """Persistent user.  Authentication lives elsewhere."""

    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_users_valid_role"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.name} ({self.role})>"

    def to_dto(self) -> User:
        """Convert ORM model to frozen domain DTO."""
        from statusflow_kernel.domain.project import User as UserDTO
        from statusflow_kernel.domain.values import UserRole

        return UserDTO(
            id=self.id,
            name=self.name,
            email=self.email or "",
            role=UserRole(self.role),
        )

    @classmethod
    def from_dto(cls, dto: User) -> UserModel:
        """Create ORM model from domain DTO."""
        return cls(
            id=dto.id,
            name=dto.name,
            email=dto.email,
            role=dto.role.value,
        )
