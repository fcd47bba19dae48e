"""Notification Dispatch Job

Delivers transactional emails outside the request that triggered them:
- Requests enqueue messages and return immediately (enqueue never raises)
- A single background worker drains the queue
- Failed sends are retried with exponential backoff, then dropped and logged
- Queue overflow and missing email configuration are logged, never raised

Started and stopped by the application lifespan (app.py).
"""

import asyncio
import logging

import config
from email_api.EmailApiWrapper import EmailApiWrapper
from exceptions.base import ConfigurationException
from exceptions.notification import EmailDeliveryException
from models.notification import EmailMessageDTO

logger = logging.getLogger(__name__)


class NotificationDispatchJob:
    """
    In-process email queue with a background worker.

    Usage:
        job = NotificationDispatchJob()
        await job.start()
        job.enqueue(EmailMessageDTO(to=..., subject=..., template=..., context={...}))
        await job.stop()
    """

    def __init__(self,
                 max_attempts: int = config.NOTIFICATION_MAX_ATTEMPTS,
                 retry_base_seconds: float = config.NOTIFICATION_RETRY_BASE_SECONDS,
                 queue_size: int = config.NOTIFICATION_QUEUE_SIZE):
        self.max_attempts = max(1, max_attempts)
        self.retry_base_seconds = retry_base_seconds
        self.queue: asyncio.Queue[EmailMessageDTO] = asyncio.Queue(maxsize=queue_size)
        self._task: asyncio.Task | None = None
        self.delivered_count = 0
        self.failed_count = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def enqueue(self, message: EmailMessageDTO) -> bool:
        """
        Queue a message for delivery.

        Returns:
            True if queued, False if it was dropped (queue full)
        """
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.error(f"[Notification] Queue full ({self.queue.maxsize}), dropping email '{message.subject}'")
            return False
        logger.debug(f"[Notification] Queued email '{message.subject}' ({self.queue.qsize()} pending)")
        return True

    async def start(self):
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("[Notification] Dispatch worker started")

    async def stop(self, drain_timeout: float = 5.0):
        """Give queued emails drain_timeout seconds, then cancel the worker."""
        if self._task is None:
            return
        if not self.queue.empty():
            try:
                await asyncio.wait_for(self.queue.join(), timeout=drain_timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[Notification] Shutdown with {self.queue.qsize()} undelivered email(s)")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("[Notification] Dispatch worker stopped")

    async def join(self):
        """Wait until every queued email has been handled (delivered or given up)."""
        await self.queue.join()

    async def _run(self):
        while True:
            message = await self.queue.get()
            try:
                await self.deliver(message)
            except Exception as e:
                # The worker must survive anything a single message throws
                logger.error(f"[Notification] Unexpected error delivering '{message.subject}': {e}", exc_info=True)
                self.failed_count += 1
            finally:
                self.queue.task_done()

    async def deliver(self, message: EmailMessageDTO) -> bool:
        """
        Send one message, retrying transient failures.

        Returns:
            True if the provider accepted the message
        """
        html = EmailApiWrapper.render(message.template, message.context)

        for attempt in range(1, self.max_attempts + 1):
            try:
                await EmailApiWrapper.send(message.to, message.subject, html)
                self.delivered_count += 1
                return True
            except ConfigurationException:
                logger.warning(f"[Notification] Email delivery not configured, skipping '{message.subject}'")
                self.failed_count += 1
                return False
            except EmailDeliveryException as e:
                if attempt == self.max_attempts:
                    logger.error(f"[Notification] Giving up on '{message.subject}' after {attempt} attempt(s): "
                                 f"status={e.status_code} {e.detail}")
                    self.failed_count += 1
                    return False
                delay = self.retry_base_seconds * (2 ** (attempt - 1))
                logger.warning(f"[Notification] Attempt {attempt}/{self.max_attempts} for '{message.subject}' failed "
                               f"(status={e.status_code}), retrying in {delay:.1f}s")
                await asyncio.sleep(delay)
        return False


_dispatcher: NotificationDispatchJob | None = None


def get_dispatcher() -> NotificationDispatchJob | None:
    return _dispatcher


def set_dispatcher(dispatcher: NotificationDispatchJob | None):
    global _dispatcher
    _dispatcher = dispatcher
