from datetime import datetime, timedelta, timezone

from jose import jwt

from student_info.config import settings
from student_info.infrastructure.security import create_access_token, decode_token

from conftest import DEFAULT_PASSWORD


def register_payload(**overrides):
    payload = {
        "email": "Mehmet.Kaya@Example.com",
        "password": "secret123",
        "firstName": "  Mehmet ",
        "lastName": "Kaya",
        "role": "student",
    }
    payload.update(overrides)
    return payload


def test_register_user_success(client):
    """Регистрация возвращает пользователя и токен"""
    response = client.post("/api/auth/register", json=register_payload())
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "mehmet.kaya@example.com"
    assert user["firstName"] == "Mehmet"
    assert user["role"] == "student"
    assert user["isActive"] is True
    assert "password" not in user and "passwordHash" not in user

    identity = decode_token(body["data"]["token"])
    assert identity.user_id == user["id"]
    assert identity.role.value == "student"


def test_register_duplicate_email_case_insensitive(client):
    """Повторный email в другом регистре - конфликт"""
    assert client.post("/api/auth/register", json=register_payload()).status_code == 201
    response = client.post("/api/auth/register", json=register_payload(email="MEHMET.KAYA@example.com"))
    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Bu email adresi zaten kullanılmaktadır"}


def test_register_validation_errors(client):
    """Некорректные поля отклоняются с 400"""
    for overrides in (
        {"email": "not-an-email"},
        {"password": "123"},
        {"role": "superuser"},
        {"firstName": ""},
        {"lastName": "x" * 51},
    ):
        response = client.post("/api/auth/register", json=register_payload(**overrides))
        assert response.status_code == 400, overrides
        assert response.json()["success"] is False


def test_login_success(client, make_user):
    user = make_user("teacher", email="ogretmen@example.com")
    response = client.post("/api/auth/login", json={"email": "OGRETMEN@example.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == user.id
    assert decode_token(data["token"]).user_id == user.id


def test_login_wrong_password(client, make_user):
    """Неверный пароль - 401"""
    make_user(email="user@example.com")
    response = client.post("/api/auth/login", json={"email": "user@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json()["message"] == "Email veya şifre hatalı"


def test_login_unknown_email(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})
    assert response.status_code == 401
    assert response.json()["message"] == "Email veya şifre hatalı"


def test_login_disabled_account(client, make_user):
    """Верный пароль, но аккаунт отключён - 401 с отдельным сообщением"""
    make_user(email="off@example.com", is_active=False)
    response = client.post("/api/auth/login", json={"email": "off@example.com", "password": DEFAULT_PASSWORD})
    assert response.status_code == 401
    assert response.json()["message"] == "Hesabınız devre dışı bırakılmıştır"


def test_login_disabled_account_wrong_password_reports_credentials(client, make_user):
    make_user(email="off@example.com", is_active=False)
    response = client.post("/api/auth/login", json={"email": "off@example.com", "password": "wrong-pass"})
    assert response.json()["message"] == "Email veya şifre hatalı"


def test_me_returns_current_user(client, make_user, auth_header):
    user = make_user("admin")
    response = client.get("/api/auth/me", headers=auth_header(user))
    assert response.status_code == 200
    assert response.json()["data"]["email"] == user.email


def test_me_without_token(client):
    """Без токена - 401 в общем формате"""
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_me_with_invalid_token(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Geçersiz token"


def test_me_with_expired_token(client, make_user):
    user = make_user()
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": user.id, "userId": user.id, "email": user.email, "role": "student",
         "iat": now - timedelta(days=8), "exp": now - timedelta(days=1)},
        settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_me_for_deleted_user_is_not_found(client, make_user, auth_header, admin_headers):
    """Токен удалённого пользователя валиден, но /me отвечает 404"""
    user = make_user()
    headers = auth_header(user)
    assert client.delete(f"/api/users/{user.id}", headers=admin_headers).status_code == 200
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 404


def test_logout(client, make_user, auth_header):
    response = client.post("/api/auth/logout", headers=auth_header(make_user()))
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Çıkış başarılı"}


def test_token_claims(client):
    token = create_access_token("abc", "a@example.com", "teacher")
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert claims["sub"] == "abc"
    assert claims["userId"] == "abc"
    assert claims["role"] == "teacher"
    assert claims["exp"] - claims["iat"] == settings.JWT_EXPIRES_MINUTES * 60


def test_login_rate_limited(client, monkeypatch):
    """Одиннадцатая попытка входа за минуту - 429"""
    from student_info.infrastructure.rate_limit import limiter

    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    payload = {"email": "ghost@example.com", "password": "whatever"}
    codes = [client.post("/api/auth/login", json=payload).status_code for _ in range(11)]
    limiter.reset()
    assert codes[:10] == [401] * 10
    assert codes[10] == 429
