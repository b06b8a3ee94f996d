"""Read access to the account directory."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session, joinedload

from notification_engine.domain.entities import Role, User
from notification_engine.infrastructure.models import RoleModel, UserModel


class UserRepository:
    """Resolve users by identifier or role for fan-out."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.id == user_id)
            .first()
        )
        return self._to_entity(model) if model else None

    def list_active(
        self,
        *,
        role_aliases: Iterable[str] | None = None,
        user_ids: Iterable[int] | None = None,
    ) -> Sequence[User]:
        """Return active users, optionally restricted by role alias or identifier."""

        query = (
            self.session.query(UserModel)
            .options(joinedload(UserModel.role))
            .filter(UserModel.is_active.is_(True))
        )
        if role_aliases is not None:
            aliases = {alias.lower() for alias in role_aliases}
            if not aliases:
                return []
            query = query.join(RoleModel, UserModel.role_id == RoleModel.id).filter(
                RoleModel.alias.in_(aliases)
            )
        if user_ids is not None:
            ids = {int(user_id) for user_id in user_ids}
            if not ids:
                return []
            query = query.filter(UserModel.id.in_(ids))
        query = query.order_by(UserModel.id)
        return [self._to_entity(model) for model in query.all()]

    def create(self, user: User) -> User:
        model = UserModel(
            role_id=user.role.id,
            name=user.name,
            email=user.email,
            language=user.language,
            is_active=user.is_active,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        if model.role is None:
            msg = "User role is not set"
            raise ValueError(msg)
        return User(
            id=model.id,
            role=Role(id=model.role.id, name=model.role.name, alias=model.role.alias),
            name=model.name,
            email=model.email,
            language=model.language,
            is_active=model.is_active,
            created_at=model.created_at,
        )


__all__ = ["UserRepository"]
