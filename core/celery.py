"""
Celery application configuration for CRO Auditor
Handles background audits with Redis as broker
"""

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun, task_retry, worker_ready, worker_shutdown
from kombu import Queue

from config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "cro_auditor",
    broker=settings.celery_broker,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["tasks.analysis"],
)

celery_app.conf.update(
    # Task Settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task Execution
    task_acks_late=True,  # Acknowledge after completion so crashed audits are re-queued
    task_reject_on_worker_lost=True,
    task_track_started=True,
    # Task Time Limits
    task_time_limit=settings.TASK_TIME_LIMIT,
    task_soft_time_limit=settings.TASK_SOFT_TIME_LIMIT,
    # Result Backend Settings
    result_expires=settings.CELERY_RESULT_EXPIRES,
    result_extended=True,
    result_compression="gzip",
    # Worker Settings
    worker_prefetch_multiplier=settings.WORKER_PREFETCH_MULTIPLIER,
    worker_max_tasks_per_child=settings.WORKER_MAX_TASKS_PER_CHILD,
    # Retry Policy
    task_default_retry_delay=settings.TASK_DEFAULT_RETRY_DELAY,
    task_max_retries=settings.TASK_MAX_RETRIES,
    # Queue Configuration
    task_default_queue="default",
    task_queues=(
        Queue("default", routing_key="task.default"),
        Queue("priority", routing_key="task.priority"),
    ),
    # Monitoring
    worker_send_task_events=True,
    task_send_sent_event=True,
    broker_connection_retry_on_startup=True,
)

celery_app.conf.task_routes = {
    "tasks.audit_website": {"queue": "default"},
    "tasks.audit_website_priority": {"queue": "priority"},
}


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    logger.info("🚀 Celery worker is ready and waiting for audits")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("🛑 Celery worker is shutting down")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, **kwargs):
    logger.info(f"⏳ Starting task: {task.name} [ID: {task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, retval=None, state=None, **kwargs):
    logger.info(f"✅ Completed task: {task.name} [ID: {task_id}] [State: {state}]")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, traceback=None, **kwargs):
    logger.error(f"❌ Task failed: {sender.name} [ID: {task_id}] [Error: {str(exception)}]")


@task_retry.connect
def task_retry_handler(sender=None, task_id=None, reason=None, **kwargs):
    logger.warning(f"🔄 Retrying task: {sender.name} [ID: {task_id}] [Reason: {reason}]")
