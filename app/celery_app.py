"""
Shadi Recommendations - Celery Configuration

Celery configuration for background task processing.
Uses Redis as the message broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings


celery_app = Celery(
    'shadi_recommendations',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['app.tasks.celery_tasks'],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Timezone
    timezone='Asia/Dubai',
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes
    task_soft_time_limit=240,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=86400,  # 24 hours

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    beat_schedule={},
)

if settings.enable_audit_retention_cleanup:
    # Daily at 3 AM
    celery_app.conf.beat_schedule['cleanup-audit-logs'] = {
        'task': 'app.tasks.celery_tasks.cleanup_audit_logs_task',
        'schedule': crontab(hour=3, minute=0),
    }
