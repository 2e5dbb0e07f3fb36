"""Доменные ошибки.

Сообщение уходит клиенту как есть, HTTP-статус назначает слой interfaces.
"""


class StudentInfoError(Exception):
    """Базовая доменная ошибка"""

    default_message = "İşlem başarısız"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StudentInfoError):
    """Данные прошли схему, но всё равно непригодны"""

    default_message = "Geçersiz veri"


class Unauthenticated(StudentInfoError):
    """Нет токена, он битый или истёк"""

    default_message = "Kimlik doğrulama gerekli"


class InvalidCredentials(Unauthenticated):
    default_message = "Email veya şifre hatalı"


class AccountDisabled(Unauthenticated):
    default_message = "Hesabınız devre dışı bırakılmıştır"


class Forbidden(StudentInfoError):
    default_message = "Bu işlem için yetkiniz bulunmamaktadır"


class NotFound(StudentInfoError):
    """Запись не найдена"""

    def __init__(self, resource: str = "Kayıt", message: str | None = None):
        self.resource = resource
        super().__init__(message or f"{resource} bulunamadı")


class Conflict(StudentInfoError):
    """Нарушение уникальности, повторная запись на курс"""

    default_message = "Kayıt zaten mevcut"


class EmailTaken(Conflict):
    default_message = "Bu email adresi zaten kullanılmaktadır"


class InvalidState(StudentInfoError):
    """Текущее состояние записи не допускает операцию"""

    default_message = "Kayıt bu işlem için uygun durumda değil"


class InvalidOperation(StudentInfoError):
    default_message = "Geçersiz işlem"


class ServerError(StudentInfoError):
    default_message = "Sunucu hatası"
