"""
Django settings for testing.
"""

from .base import *  # noqa: F403, F401

DEBUG = False

SECRET_KEY = "test-secret-key"

# Use faster password hasher in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Use in-memory database for faster tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Use local memory cache
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
    }
}

# Disable security features in tests
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

# Use database sessions
SESSION_ENGINE = "django.contrib.sessions.backends.db"

# Disable throttling in tests
REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []  # noqa: F405
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}  # noqa: F405

# Celery in eager mode for tests
CELERY_BROKER_URL = "memory://"
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True

# Disable logging during tests
LOGGING = {
    "version": 1,
    "disable_existing_loggers": True,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
        "level": "CRITICAL",
    },
}

# Static files - simplified
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Engine defaults pinned so tests do not depend on the environment
LMS_DEFAULT_PASSING_SCORE = 70
LMS_QUIZZES_ENABLED = True
LMS_CERTIFICATES_ENABLED = True
CERTIFICATE_NUMBER_PREFIX = "TEST"
SITE_URL = "https://lms.test"
