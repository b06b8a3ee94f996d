"""Persistence layer for roles."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from notification_engine.domain.entities import Role
from notification_engine.infrastructure.models import RoleModel


class RoleRepository:
    """Provide read and seed operations for :class:`Role` entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list(self) -> Sequence[Role]:
        query = self.session.query(RoleModel).order_by(RoleModel.id)
        return [self._to_entity(model) for model in query.all()]

    def get_by_alias(self, alias: str) -> Role | None:
        model = (
            self.session.query(RoleModel)
            .filter(RoleModel.alias.ilike(alias))
            .first()
        )
        return self._to_entity(model) if model else None

    def get_or_create(self, *, name: str, alias: str) -> Role:
        existing = self.get_by_alias(alias)
        if existing is not None:
            return existing
        model = RoleModel(name=name, alias=alias)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: RoleModel) -> Role:
        return Role(id=model.id, name=model.name, alias=model.alias)


__all__ = ["RoleRepository"]
