"""
Celery configuration for Academy LMS project.
"""

import os

from celery import Celery

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("academy_lms")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Configure task queues
app.conf.task_queues = {
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
    "certificates": {
        "exchange": "certificates",
        "routing_key": "certificates",
    },
}

# Task routing
app.conf.task_routes = {
    "apps.certifications.tasks.*": {"queue": "certificates"},
}

# Default queue
app.conf.task_default_queue = "default"
