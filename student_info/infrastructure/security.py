from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from ..config import settings
from ..domain.entities import Identity, Role

pwd = CryptContext(
    schemes=["bcrypt_sha256"],
    deprecated="auto",
    bcrypt_sha256__rounds=settings.BCRYPT_ROUNDS,
    bcrypt_sha256__truncate_error=False,
)


class PasswordHasher:
    def hash(self, plain: str) -> str: return pwd.hash(plain)
    def verify(self, plain: str, hashed: str) -> bool: return pwd.verify(plain, hashed)

    def dummy_verify(self) -> bool:
        """Тратит столько же времени, сколько настоящая проверка."""
        return pwd.dummy_verify()


def create_access_token(user_id: str, email: str, role: str, minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=minutes or settings.JWT_EXPIRES_MINUTES)
    payload = {
        "sub": user_id,
        "userId": user_id,
        "email": email,
        "role": Role(role).value,
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Identity:
    """Возвращает Identity из токена или кидает JWTError."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    user_id = payload.get("userId") or payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise JWTError("No subject")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise JWTError("Unknown role")
    return Identity(user_id=user_id, email=email, role=role)
