import structlog

from ...domain.entities import Identity, Role
from ...domain.errors import AccountDisabled, EmailTaken, InvalidCredentials, NotFound
from ..dto import RegisterUserInput

logger = structlog.get_logger()


class IUserRepository:
    def get(self, user_id: str): ...
    def get_by_email(self, email: str): ...
    def create(self, email: str, password_hash: str, first_name: str, last_name: str, role: str): ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...
    def verify(self, plain: str, hashed: str) -> bool: ...
    def dummy_verify(self) -> bool: ...


class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, data: RegisterUserInput):
        email = data.email.strip().lower()
        if self.repo.get_by_email(email):
            raise EmailTaken()
        user = self.repo.create(
            email=email,
            password_hash=self.hasher.hash(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            role=Role(data.role).value,
        )
        logger.info("user_registered", user_id=user.id, role=user.role)
        return user


class LoginUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, email: str, password: str):
        user = self.repo.get_by_email(email)
        if user is None:
            self.hasher.dummy_verify()
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            logger.info("login_failed", reason="bad_password", user_id=user.id)
            raise InvalidCredentials()
        if not user.is_active:
            logger.info("login_failed", reason="disabled", user_id=user.id)
            raise AccountDisabled()
        return user


class GetCurrentUser:
    def __init__(self, repo: IUserRepository):
        self.repo = repo

    def execute(self, identity: Identity):
        # Токен остаётся валидным до истечения, даже если пользователь удалён
        user = self.repo.get(identity.user_id)
        if user is None:
            raise NotFound("Kullanıcı")
        return user
