"""StatusSelector -- read access to statuses."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select

from statusflow_kernel.domain.workflow import Status
from statusflow_kernel.models.status import StatusModel
from statusflow_kernel.selectors.base import BaseSelector


class StatusSelector(BaseSelector[StatusModel]):

    def get(self, status_id: str) -> Status | None:
        model = self.session.get(StatusModel, status_id)
        return model.to_dto() if model is not None else None

    def list_all(self) -> list[Status]:
        stmt = select(StatusModel).order_by(StatusModel.name, StatusModel.id)
        return [m.to_dto() for m in self.session.scalars(stmt)]

    def get_many(self, status_ids: Iterable[str]) -> list[Status]:
        """Statuses for ``status_ids`` in the given order; unknown ids are skipped."""
        ids = list(status_ids)
        if not ids:
            return []
        stmt = select(StatusModel).where(StatusModel.id.in_(ids))
        by_id = {m.id: m.to_dto() for m in self.session.scalars(stmt)}
        return [by_id[i] for i in ids if i in by_id]

    def for_entity_type(self, entity_type: str) -> list[Status]:
        """Statuses tagged for ``entity_type``.  Filtered in Python: the tag
        list is a JSON column and JSON operators differ per backend."""
        return [s for s in self.list_all() if s.applies_to(entity_type)]

    def exists(self, status_id: str) -> bool:
        return self.session.get(StatusModel, status_id) is not None
