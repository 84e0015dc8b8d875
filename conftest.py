"""
Root pytest configuration for the Django project.

Provides safe environment defaults so the suite runs against SQLite,
a local-memory cache and eager Celery without any external services.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///test-db.sqlite3")
os.environ.setdefault("USE_LOCMEM_CACHE", "true")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("EMAIL_BACKEND", "django.core.mail.backends.locmem.EmailBackend")
os.environ.setdefault(
    "DEFAULT_FILE_STORAGE_BACKEND", "django.core.files.storage.InMemoryStorage"
)
os.environ.setdefault("PAYMENT_WEBHOOK_SECRET", "whsk_test_secret")
os.environ.setdefault("SECURE_SSL_REDIRECT", "false")
