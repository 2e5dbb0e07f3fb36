from typing import Any

from ...application.dto import Page
from .schemas import Envelope, Pagination


def ok(data: Any = None, message: str = "İşlem başarılı") -> Envelope:
    return Envelope(success=True, message=message, data=data)


def paginated(page: Page, data: list[Any], message: str) -> Envelope:
    return Envelope(
        success=True,
        message=message,
        data=data,
        pagination=Pagination(
            page=page.request.page,
            limit=page.request.limit,
            total=page.total,
            total_pages=page.total_pages,
        ),
    )
