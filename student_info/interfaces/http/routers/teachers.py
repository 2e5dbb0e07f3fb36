from fastapi import APIRouter, Depends, status

from ....application.dto import Page, PageRequest
from ....application.use_cases.profiles import TeacherRegistry
from ....domain import policy
from ....domain.entities import Identity, TeacherTitle
from ....infrastructure.cache import COURSES_PREFIX, TEACHERS_PREFIX, cached_list, delete_cache_pattern
from ..authz import get_identity, require_admin
from ..dependencies import get_teacher_registry, page_params
from ..responses import ok, paginated
from ..schemas import Envelope, TeacherCreate, TeacherOut, TeacherUpdate

router = APIRouter(prefix="/api/teachers", tags=["teachers"])


def _project(identity: Identity, teacher) -> TeacherOut:
    """Скрывает контактные поля от посторонних."""
    out = teacher if isinstance(teacher, TeacherOut) else TeacherOut.model_validate(teacher)
    hidden = policy.teacher_hidden_fields(identity, out)
    if hidden:
        out = out.model_copy(update={name: None for name in hidden})
    return out


def _invalidate() -> None:
    delete_cache_pattern(f"{TEACHERS_PREFIX}:*")
    # курсы встраивают сводку преподавателя
    delete_cache_pattern(f"{COURSES_PREFIX}:*")


def _page_out(identity: Identity, result: Page, message: str) -> Envelope:
    return paginated(result, [_project(identity, t) for t in result.items], message)


@router.get("", response_model=Envelope[list[TeacherOut]], response_model_exclude_none=True)
def list_teachers(page: PageRequest = Depends(page_params),
                  identity: Identity = Depends(get_identity),
                  teachers: TeacherRegistry = Depends(get_teacher_registry)):
    def load():
        result = teachers.list(identity, page)
        return [TeacherOut.model_validate(t).model_dump(mode="json") for t in result.items], result.total

    criteria = policy.teacher_list_filter(identity)
    items, total = cached_list(TEACHERS_PREFIX, criteria, page.page, page.limit, load)
    result = Page(items=[TeacherOut.model_validate(t) for t in items], total=total, request=page)
    return _page_out(identity, result, "Öğretmenler getirildi")


@router.get("/by-department/{department}", response_model=Envelope[list[TeacherOut]],
            response_model_exclude_none=True)
def list_teachers_by_department(department: str,
                                page: PageRequest = Depends(page_params),
                                identity: Identity = Depends(get_identity),
                                teachers: TeacherRegistry = Depends(get_teacher_registry)):
    result = teachers.list_by_department(identity, department, page)
    return _page_out(identity, result, f"{department} bölümü öğretmenleri getirildi")


@router.get("/by-title/{title}", response_model=Envelope[list[TeacherOut]], response_model_exclude_none=True)
def list_teachers_by_title(title: TeacherTitle,
                           page: PageRequest = Depends(page_params),
                           identity: Identity = Depends(get_identity),
                           teachers: TeacherRegistry = Depends(get_teacher_registry)):
    result = teachers.list_by_title(identity, title.value, page)
    return _page_out(identity, result, f"{title.value} unvanlı öğretmenler getirildi")


@router.get("/{teacher_id}", response_model=Envelope[TeacherOut], response_model_exclude_none=True)
def get_teacher(teacher_id: str,
                identity: Identity = Depends(get_identity),
                teachers: TeacherRegistry = Depends(get_teacher_registry)):
    return ok(_project(identity, teachers.get(identity, teacher_id)), "Öğretmen getirildi")


@router.post("", response_model=Envelope[TeacherOut], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def create_teacher(payload: TeacherCreate,
                   identity: Identity = Depends(require_admin),
                   teachers: TeacherRegistry = Depends(get_teacher_registry)):
    teacher = teachers.create(identity, payload.model_dump(exclude_none=True))
    _invalidate()
    return ok(_project(identity, teacher), "Öğretmen başarıyla oluşturuldu")


@router.put("/{teacher_id}", response_model=Envelope[TeacherOut], response_model_exclude_none=True)
def update_teacher(teacher_id: str, payload: TeacherUpdate,
                   identity: Identity = Depends(get_identity),
                   teachers: TeacherRegistry = Depends(get_teacher_registry)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    teacher = teachers.update(identity, teacher_id, changes)
    _invalidate()
    return ok(_project(identity, teacher), "Öğretmen başarıyla güncellendi")


@router.delete("/{teacher_id}", response_model=Envelope[None], response_model_exclude_none=True)
def delete_teacher(teacher_id: str,
                   identity: Identity = Depends(require_admin),
                   teachers: TeacherRegistry = Depends(get_teacher_registry)):
    teachers.delete(identity, teacher_id)
    _invalidate()
    return ok(message="Öğretmen başarıyla silindi")
