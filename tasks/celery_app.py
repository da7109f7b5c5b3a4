"""
Celery application configuration.

This module sets up Celery with Redis as the message broker and result
backend. The service has no request-driven background work; Celery only
runs the periodic maintenance jobs scheduled by beat.
"""

from celery import Celery
from kombu import Exchange, Queue

from api.config import settings

# Create Celery application
celery_app = Celery(
    'callsheet',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=['tasks.maintenance_tasks']
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer='json',
    result_serializer='json',
    accept_content=['json'],

    # Timezone
    timezone='UTC',
    enable_utc=True,

    # Task execution
    task_time_limit=300,  # 5 minutes hard timeout
    task_soft_time_limit=240,
    worker_prefetch_multiplier=1,

    # Results
    result_expires=3600,  # Results expire after 1 hour

    # Task routing
    task_default_queue='default',
    task_default_exchange='default',
    task_default_routing_key='default',

    # Task acknowledgement
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)

# Define task queues
celery_app.conf.task_queues = (
    Queue('default', Exchange('default'), routing_key='default'),
    Queue('maintenance', Exchange('maintenance'), routing_key='maintenance.#'),
)

# Task routes
celery_app.conf.task_routes = {
    'tasks.maintenance_tasks.*': {'queue': 'maintenance', 'routing_key': 'maintenance.task'},
}

# Beat schedule
celery_app.conf.beat_schedule = {
    'ping-keepalive': {
        'task': 'tasks.maintenance_tasks.ping_keepalive',
        'schedule': float(settings.KEEPALIVE_INTERVAL_SECONDS),
    },
    'cleanup-partial-uploads': {
        'task': 'tasks.maintenance_tasks.cleanup_partial_uploads',
        'schedule': 3600.0,  # Every hour
    },
}


if __name__ == '__main__':
    celery_app.start()
