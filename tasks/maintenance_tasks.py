"""
Maintenance background tasks.

Periodic jobs run by Celery beat: an external keep-alive ping and removal
of stale partial uploads. Neither touches request handling.
"""

import logging
from typing import Any, Dict, Optional

import requests

from api.config import settings
from services.storage_service import StorageService
from tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name='tasks.maintenance_tasks.ping_keepalive')
def ping_keepalive(url: Optional[str] = None) -> Dict[str, Any]:
    """
    Ping an external URL so the hosting platform keeps the service awake.

    Args:
        url: URL to ping (default: settings.KEEPALIVE_URL)

    Returns:
        {'url': str | None, 'ok': bool, 'status_code': int | None}
    """
    url = url or settings.KEEPALIVE_URL
    if not url:
        logger.debug("Keep-alive URL not configured, skipping ping")
        return {'url': None, 'ok': False, 'status_code': None}

    try:
        response = requests.get(url, timeout=10)
    except requests.RequestException as e:
        logger.error(f"Error during health check of {url}: {e}")
        return {'url': url, 'ok': False, 'status_code': None}

    if response.ok:
        logger.info("Health check successful")
    else:
        logger.error(f"Health check failed: {response.status_code} {response.reason}")

    return {'url': url, 'ok': response.ok, 'status_code': response.status_code}


@celery_app.task(name='tasks.maintenance_tasks.cleanup_partial_uploads')
def cleanup_partial_uploads(older_than_hours: Optional[int] = None) -> Dict[str, int]:
    """
    Remove partial upload files left behind by interrupted requests.

    Returns:
        {'deleted': int}
    """
    if older_than_hours is None:
        older_than_hours = settings.PARTIAL_UPLOAD_MAX_AGE_HOURS

    storage = StorageService(upload_dir=settings.UPLOAD_DIR)
    deleted = storage.cleanup_partial_uploads(older_than_hours=older_than_hours)

    return {'deleted': deleted}
