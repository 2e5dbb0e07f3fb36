from fastapi import APIRouter, Depends, status

from ....application.dto import PageRequest, RegisterUserInput
from ....application.use_cases.users import UserAdmin
from ....domain.entities import Identity
from ....infrastructure.cache import COURSES_PREFIX, TEACHERS_PREFIX, delete_cache_pattern
from ..authz import get_identity, require_admin
from ..dependencies import get_user_admin, page_params
from ..responses import ok, paginated
from ..schemas import Envelope, RegisterReq, UserOut, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])


def _invalidate() -> None:
    # списки преподавателей и курсов встраивают сводку пользователя
    delete_cache_pattern(f"{TEACHERS_PREFIX}:*")
    delete_cache_pattern(f"{COURSES_PREFIX}:*")


@router.get("", response_model=Envelope[list[UserOut]], response_model_exclude_none=True)
def list_users(page: PageRequest = Depends(page_params),
               identity: Identity = Depends(require_admin),
               users: UserAdmin = Depends(get_user_admin)):
    result = users.list(identity, page)
    return paginated(result, [UserOut.model_validate(u) for u in result.items], "Kullanıcılar getirildi")


@router.post("", response_model=Envelope[UserOut], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def create_user(payload: RegisterReq,
                identity: Identity = Depends(require_admin),
                users: UserAdmin = Depends(get_user_admin)):
    user = users.create(identity, RegisterUserInput(**payload.model_dump()))
    return ok(UserOut.model_validate(user), "Kullanıcı başarıyla oluşturuldu")


@router.get("/{user_id}", response_model=Envelope[UserOut], response_model_exclude_none=True)
def get_user(user_id: str,
             identity: Identity = Depends(get_identity),
             users: UserAdmin = Depends(get_user_admin)):
    return ok(UserOut.model_validate(users.get(identity, user_id)), "Kullanıcı getirildi")


@router.put("/{user_id}", response_model=Envelope[UserOut], response_model_exclude_none=True)
def update_user(user_id: str, payload: UserUpdate,
                identity: Identity = Depends(get_identity),
                users: UserAdmin = Depends(get_user_admin)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    user = users.update(identity, user_id, changes)
    _invalidate()
    return ok(UserOut.model_validate(user), "Kullanıcı başarıyla güncellendi")


@router.delete("/{user_id}", response_model=Envelope[None], response_model_exclude_none=True)
def delete_user(user_id: str,
                identity: Identity = Depends(require_admin),
                users: UserAdmin = Depends(get_user_admin)):
    users.delete(identity, user_id)
    _invalidate()
    return ok(message="Kullanıcı başarıyla silindi")
