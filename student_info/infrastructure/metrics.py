from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Метрики для HTTP запросов
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Метрики для кэша
cache_hits_total = Counter('cache_hits_total', 'Total cache hits', ['resource'])
cache_misses_total = Counter('cache_misses_total', 'Total cache misses', ['resource'])

# Запись на курсы: action = enroll|unenroll, outcome = ok|<имя ошибки>
enrollment_operations_total = Counter(
    'enrollment_operations_total',
    'Enrollment state transitions by outcome',
    ['action', 'outcome']
)


def metrics_endpoint():
    """Endpoint для Prometheus метрик"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
