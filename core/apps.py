import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)

PROCESS_LOCAL_CACHES = (
    'django.core.cache.backends.locmem.LocMemCache',
    'django.core.cache.backends.dummy.DummyCache',
)


class CoreConfig(AppConfig):
    name = 'core'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        """Report the settings the lifecycle engine depends on."""
        cache_backend = settings.CACHES['default']['BACKEND']
        logger.info(
            f"Lifecycle engine: celery_eager={settings.CELERY_TASK_ALWAYS_EAGER} "
            f"auto_assign_lease={settings.AUTO_ASSIGN_LEASE_SECONDS}s cache={cache_backend}"
        )

        # The auto-assign lease only excludes runs that share this cache
        if not settings.DEBUG and cache_backend in PROCESS_LOCAL_CACHES:
            logger.warning(
                "Auto-assign lease is stored in a process-local cache; "
                "configure CACHE_BACKEND for multi-process deployments"
            )
