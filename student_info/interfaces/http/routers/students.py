from fastapi import APIRouter, Depends, status

from ....application.dto import PageRequest
from ....application.use_cases.profiles import StudentRegistry
from ....domain.entities import Identity
from ..authz import get_identity, require_admin, require_staff
from ..dependencies import get_student_registry, page_params
from ..responses import ok, paginated
from ..schemas import Envelope, StudentCreate, StudentOut, StudentUpdate

router = APIRouter(prefix="/api/students", tags=["students"])


@router.get("", response_model=Envelope[list[StudentOut]], response_model_exclude_none=True)
def list_students(page: PageRequest = Depends(page_params),
                  identity: Identity = Depends(require_staff),
                  students: StudentRegistry = Depends(get_student_registry)):
    result = students.list(identity, page)
    return paginated(result, [StudentOut.model_validate(s) for s in result.items], "Öğrenciler getirildi")


@router.get("/by-department/{department}", response_model=Envelope[list[StudentOut]],
            response_model_exclude_none=True)
def list_students_by_department(department: str,
                                page: PageRequest = Depends(page_params),
                                identity: Identity = Depends(require_staff),
                                students: StudentRegistry = Depends(get_student_registry)):
    result = students.list_by_department(identity, department, page)
    return paginated(
        result,
        [StudentOut.model_validate(s) for s in result.items],
        f"{department} bölümü öğrencileri getirildi",
    )


@router.get("/{student_id}", response_model=Envelope[StudentOut], response_model_exclude_none=True)
def get_student(student_id: str,
                identity: Identity = Depends(get_identity),
                students: StudentRegistry = Depends(get_student_registry)):
    return ok(StudentOut.model_validate(students.get(identity, student_id)), "Öğrenci getirildi")


@router.post("", response_model=Envelope[StudentOut], response_model_exclude_none=True,
             status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate,
                   identity: Identity = Depends(require_admin),
                   students: StudentRegistry = Depends(get_student_registry)):
    student = students.create(identity, payload.model_dump(exclude_none=True))
    return ok(StudentOut.model_validate(student), "Öğrenci başarıyla oluşturuldu")


@router.put("/{student_id}", response_model=Envelope[StudentOut], response_model_exclude_none=True)
def update_student(student_id: str, payload: StudentUpdate,
                   identity: Identity = Depends(get_identity),
                   students: StudentRegistry = Depends(get_student_registry)):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    student = students.update(identity, student_id, changes)
    return ok(StudentOut.model_validate(student), "Öğrenci başarıyla güncellendi")


@router.delete("/{student_id}", response_model=Envelope[None], response_model_exclude_none=True)
def delete_student(student_id: str,
                   identity: Identity = Depends(require_admin),
                   students: StudentRegistry = Depends(get_student_registry)):
    students.delete(identity, student_id)
    return ok(message="Öğrenci başarıyla silindi")
