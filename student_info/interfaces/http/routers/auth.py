from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from ....application.dto import RegisterUserInput
from ....application.use_cases.identity import GetCurrentUser, LoginUser, RegisterUser
from ....domain.entities import Identity
from ....infrastructure.db import get_db
from ....infrastructure.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token
from ..authz import get_identity
from ..responses import ok
from ..schemas import AuthData, Envelope, LoginReq, RegisterReq, UserOut

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_data(user) -> AuthData:
    token = create_access_token(user.id, user.email, user.role)
    return AuthData(user=UserOut.model_validate(user), token=token)


@router.post("/register", response_model=Envelope[AuthData], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(request: Request, payload: RegisterReq, db: Session = Depends(get_db)):
    uc = RegisterUser(repo=UserRepository(db), hasher=PasswordHasher())
    user = uc.execute(RegisterUserInput(**payload.model_dump()))
    return ok(_auth_data(user), "Kullanıcı başarıyla oluşturuldu")


@router.post("/login", response_model=Envelope[AuthData], response_model_exclude_none=True)
@limiter.limit(LOGIN_LIMIT)
def login(request: Request, payload: LoginReq, db: Session = Depends(get_db)):
    uc = LoginUser(repo=UserRepository(db), hasher=PasswordHasher())
    user = uc.execute(payload.email, payload.password)
    return ok(_auth_data(user), "Giriş başarılı")


@router.post("/logout", response_model=Envelope[None], response_model_exclude_none=True)
def logout(identity: Identity = Depends(get_identity)):
    # Токены без состояния: клиент просто забывает токен
    return ok(message="Çıkış başarılı")


@router.get("/me", response_model=Envelope[UserOut], response_model_exclude_none=True)
def me(identity: Identity = Depends(get_identity), db: Session = Depends(get_db)):
    user = GetCurrentUser(UserRepository(db)).execute(identity)
    return ok(UserOut.model_validate(user), "Kullanıcı bilgileri getirildi")
