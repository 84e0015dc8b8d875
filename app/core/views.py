"""
Infrastructure endpoints (health checks).
"""

from django.core.cache import cache
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django_redis.exceptions import ConnectionInterrupted


def health_check(request):
    """
    Liveness/readiness probe.

    Returns 200 when the database answers, 503 otherwise. A cache outage
    is reported but does not fail the check; payouts and webhooks only
    need the database.
    """
    health_status = {"status": "healthy", "database": "connected", "cache": "connected"}

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError:
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"

    try:
        cache.set("health_check", "ok", timeout=1)
        if cache.get("health_check") != "ok":
            health_status["cache"] = "disconnected"
    except (ConnectionInterrupted, ConnectionError):
        health_status["cache"] = "disconnected"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JsonResponse(health_status, status=status_code)
