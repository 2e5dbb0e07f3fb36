import math
from dataclasses import dataclass, field
from typing import Any

MAX_PAGE_LIMIT = 50
DEFAULT_PAGE_LIMIT = 10


@dataclass
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    def __post_init__(self):
        self.page = max(self.page, 1)
        self.limit = min(max(self.limit, 1), MAX_PAGE_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: list[Any]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.limit)


@dataclass
class RegisterUserInput:
    email: str
    password: str
    first_name: str
    last_name: str
    role: str
