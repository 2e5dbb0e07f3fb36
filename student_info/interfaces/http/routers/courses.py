from fastapi import APIRouter, Body, Depends, status

from ....application.dto import Page, PageRequest
from ....application.use_cases.courses import CourseCatalog
from ....domain.entities import Identity
from ....domain.errors import StudentInfoError
from ....infrastructure.cache import COURSES_PREFIX, cached_list, delete_cache_pattern
from ....infrastructure.metrics import enrollment_operations_total
from ..authz import get_identity, require_admin, require_staff
from ..dependencies import get_course_catalog, page_params
from ..responses import ok, paginated
from ..schemas import CourseCreate, CourseOut, CourseUpdate, EnrollReq, Envelope

router = APIRouter(prefix="/api/courses", tags=["courses"])


def _invalidate() -> None:
    delete_cache_pattern(f"{COURSES_PREFIX}:*")


@router.get("", response_model=Envelope[list[CourseOut]], response_model_exclude_none=True)
def list_courses(page: PageRequest = Depends(page_params),
                 identity: Identity = Depends(get_identity),
                 catalog: CourseCatalog = Depends(get_course_catalog)):
    # Кэш по фильтру роли: у каждого преподавателя своя страница
    criteria = catalog.list_filter(identity)

    def load():
        result = catalog.list(criteria, page)
        return [CourseOut.model_validate(c).model_dump(mode="json") for c in result.items], result.total

    items, total = cached_list(COURSES_PREFIX, criteria, page.page, page.limit, load)
    result = Page(items=items, total=total, request=page)
    return paginated(result, items, "Dersler getirildi")


@router.get("/{course_id}", response_model=Envelope[CourseOut], response_model_exclude_none=True)
def get_course(course_id: str,
               identity: Identity = Depends(get_identity),
               catalog: CourseCatalog = Depends(get_course_catalog)):
    return ok(CourseOut.model_validate(catalog.get(identity, course_id)), "Ders getirildi")


@router.post("", response_model=Envelope[CourseOut], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate,
                  identity: Identity = Depends(require_staff),
                  catalog: CourseCatalog = Depends(get_course_catalog)):
    course = catalog.create(identity, payload.model_dump(mode="json"))
    _invalidate()
    return ok(CourseOut.model_validate(course), "Ders başarıyla oluşturuldu")


@router.put("/{course_id}", response_model=Envelope[CourseOut], response_model_exclude_none=True)
def update_course(course_id: str, payload: CourseUpdate,
                  identity: Identity = Depends(get_identity),
                  catalog: CourseCatalog = Depends(get_course_catalog)):
    changes = payload.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    course = catalog.update(identity, course_id, changes)
    _invalidate()
    return ok(CourseOut.model_validate(course), "Ders başarıyla güncellendi")


@router.delete("/{course_id}", response_model=Envelope[None], response_model_exclude_none=True)
def delete_course(course_id: str,
                  identity: Identity = Depends(require_admin),
                  catalog: CourseCatalog = Depends(get_course_catalog)):
    catalog.delete(identity, course_id)
    _invalidate()
    return ok(message="Ders başarıyla silindi")


@router.post("/{course_id}/enroll", response_model=Envelope[CourseOut], response_model_exclude_none=True)
def enroll(course_id: str,
           payload: EnrollReq | None = Body(None),
           identity: Identity = Depends(get_identity),
           catalog: CourseCatalog = Depends(get_course_catalog)):
    student_id = payload.student_id if payload else None
    try:
        course = catalog.enroll(identity, course_id, student_id)
    except StudentInfoError as e:
        enrollment_operations_total.labels(action="enroll", outcome=type(e).__name__).inc()
        raise
    enrollment_operations_total.labels(action="enroll", outcome="ok").inc()
    _invalidate()
    return ok(CourseOut.model_validate(course), "Öğrenci derse başarıyla kaydedildi")


@router.delete("/{course_id}/enroll/{student_id}", response_model=Envelope[CourseOut],
               response_model_exclude_none=True)
def unenroll(course_id: str, student_id: str,
             identity: Identity = Depends(get_identity),
             catalog: CourseCatalog = Depends(get_course_catalog)):
    try:
        course = catalog.unenroll(identity, course_id, student_id)
    except StudentInfoError as e:
        enrollment_operations_total.labels(action="unenroll", outcome=type(e).__name__).inc()
        raise
    enrollment_operations_total.labels(action="unenroll", outcome="ok").inc()
    _invalidate()
    return ok(CourseOut.model_validate(course), "Öğrencinin ders kaydı silindi")
