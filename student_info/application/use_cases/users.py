from typing import Any

import structlog

from ...domain import policy
from ...domain.entities import Identity
from ...domain.errors import NotFound
from ..dto import Page, PageRequest, RegisterUserInput
from .identity import RegisterUser

logger = structlog.get_logger()


class UserAdmin:
    """CRUD пользователей. Удаление не трогает профиль студента или преподавателя."""

    def __init__(self, users, hasher):
        self.users = users
        self.hasher = hasher

    def _get(self, user_id: str):
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("Kullanıcı")
        return user

    def list(self, identity: Identity, page: PageRequest) -> Page:
        policy.require_admin(identity)
        rows, total = self.users.page(page)
        return Page(items=rows, total=total, request=page)

    def get(self, identity: Identity, user_id: str):
        policy.check_user_access(identity, user_id)
        return self._get(user_id)

    def create(self, identity: Identity, data: RegisterUserInput):
        policy.require_admin(identity)
        return RegisterUser(self.users, self.hasher).execute(data)

    def update(self, identity: Identity, user_id: str, changes: dict[str, Any]):
        changes = policy.user_update_fields(identity, user_id, changes)
        user = self._get(user_id)
        for name in ("first_name", "last_name"):
            if name in changes:
                changes[name] = changes[name].strip()
        return self.users.update(user, changes)

    def delete(self, identity: Identity, user_id: str) -> None:
        policy.check_user_delete(identity, user_id)
        user = self._get(user_id)
        self.users.delete(user)
        logger.info("user_deleted", user_id=user_id, by=identity.user_id)
