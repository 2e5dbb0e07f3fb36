from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from ...domain import policy
from ...domain.entities import Identity, Role
from ...domain.errors import Unauthenticated
from ...infrastructure.security import decode_token

# auto_error=False: отсутствие токена отдаём как 401 в общем формате ответа
bearer = HTTPBearer(auto_error=False)


def get_identity(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> Identity:
    if creds is None or not creds.credentials:
        raise Unauthenticated("Token bulunamadı")
    try:
        return decode_token(creds.credentials)
    except JWTError:
        raise Unauthenticated("Geçersiz token")


def require_roles(*roles: Role):
    def checker(identity: Identity = Depends(get_identity)) -> Identity:
        policy.authorize_role(identity, roles)
        return identity
    return checker


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.TEACHER, Role.ADMIN)
