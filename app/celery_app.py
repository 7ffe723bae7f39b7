from celery import Celery
import os
import logging

logger = logging.getLogger(__name__)


def make_celery(app_name=__name__):
    broker_url = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
    celery = Celery(
        app_name,
        broker=broker_url,
        backend=os.environ.get('CELERY_RESULT_BACKEND', broker_url),
        include=['tasks']
    )

    celery.conf.update(
        task_serializer='json',
        accept_content=['json'],
        result_serializer='json',
        timezone='UTC',
        enable_utc=True,
        task_always_eager=os.environ.get('CELERY_ALWAYS_EAGER', 'false').lower() == 'true',
    )
    logger.debug(f"Celery configured with broker {broker_url}")
    return celery


celery = make_celery('article_groups')
