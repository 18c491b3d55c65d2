"""
Celery configuration for FitCheck.

Sets up Celery for the scheduled competition and reminder jobs with a Redis
broker. The beat schedule lives in settings.CELERY_BEAT_SCHEDULE.
"""

import os
from celery import Celery

# Set default Django settings module
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fitcheck.settings")

app = Celery("fitcheck")

# Load config from Django settings with CELERY_ prefix
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all registered Django apps
app.autodiscover_tasks()
