import json
import redis
from typing import Optional, Any, Callable
from ..config import settings
from .metrics import cache_hits_total, cache_misses_total

_redis_client: Optional[redis.Redis] = None

COURSES_PREFIX = "courses"
TEACHERS_PREFIX = "teachers"


def get_redis() -> redis.Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True
        )
    return _redis_client


def list_key(prefix: str, criteria: dict, page: int, limit: int) -> str:
    """Ключ страницы списка: фильтр роли + пагинация."""
    parts = ",".join(f"{k}={criteria[k]}" for k in sorted(criteria)) or "all"
    return f"{prefix}:list:{parts}:{page}:{limit}"


def get_cache(key: str) -> Optional[Any]:
    """Получить значение из кэша"""
    if not settings.CACHE_ENABLED:
        return None
    try:
        client = get_redis()
        value = client.get(key)
        if value:
            return json.loads(value)
    except Exception:
        # Если Redis недоступен, просто возвращаем None
        pass
    return None


def set_cache(key: str, value: Any, ttl: int = None) -> bool:
    """Сохранить значение в кэш"""
    if not settings.CACHE_ENABLED:
        return False
    try:
        client = get_redis()
        ttl = ttl or settings.CACHE_TTL
        client.setex(key, ttl, json.dumps(value, ensure_ascii=False))
        return True
    except Exception:
        # Если Redis недоступен, просто игнорируем
        return False


def cached_list(prefix: str, criteria: dict, page: int, limit: int,
                load: Callable[[], tuple[list, int]]) -> tuple[list, int]:
    """Страница списка из кэша либо из load(); элементы уже сериализованы в JSON."""
    key = list_key(prefix, criteria, page, limit)
    cached = get_cache(key)
    if cached is not None:
        cache_hits_total.labels(resource=prefix).inc()
        return cached["items"], cached["total"]

    cache_misses_total.labels(resource=prefix).inc()
    items, total = load()
    set_cache(key, {"items": items, "total": total})
    return items, total


def delete_cache_pattern(pattern: str) -> int:
    """Удалить все ключи по паттерну"""
    if not settings.CACHE_ENABLED:
        return 0
    try:
        client = get_redis()
        keys = client.keys(pattern)
        if keys:
            return client.delete(*keys)
        return 0
    except Exception:
        return 0
