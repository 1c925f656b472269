#!/usr/bin/env python3
"""
Notification Service

Delivers the notifications produced by matching and pipeline operations.
Services never call this directly: they publish NotificationMessage objects
to their unit of work, which hands them to ``dispatch_all`` after commit.
Delivery failures are logged and never reach the caller.

Usage:
    from notification.service import NotificationService

    service = NotificationService.from_config(config.notifications)
    with unit_of_work(SessionLocal, service) as uow:
        uow.publish(NotificationMessage(user_id=..., type='new_match', ...))
"""

import os
import logging
import uuid
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Iterable

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry

from core.config_loader import NotificationConfig
from notification.channels import NotificationChannelFactory
from notification.message_builder import NotificationContent

logger = logging.getLogger(__name__)


@dataclass
class NotificationMessage:
    """A notification addressed to one user, waiting for delivery."""
    user_id: str
    type: str
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_content(cls, user_id: Any, content: NotificationContent) -> "NotificationMessage":
        return cls(
            user_id=str(user_id),
            type=content.type,
            title=content.title,
            body=content.body,
            data=content.data,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class NotificationService:
    """
    Routes messages to the enabled channels, via Redis Queue when available.

    Async mode enqueues one RQ job per message; sync mode (explicitly
    configured, or Redis unreachable) delivers in-process.
    """

    def __init__(
        self,
        channels: Optional[List[str]] = None,
        recipients: Optional[Dict[str, str]] = None,
        redis_url: Optional[str] = None,
        use_async_queue: bool = True,
        queue_name: str = 'notifications',
        job_timeout: str = '5m',
        enabled: bool = True,
        session_factory=None
    ):
        """
        Initialize notification service.

        Args:
            channels: Channel types to deliver to (default: ['in_app'])
            recipients: Fixed recipient per channel (e.g. webhook URL)
            redis_url: Redis connection URL
            use_async_queue: Whether to use async queue or sync mode
            queue_name: RQ queue the worker listens on
            job_timeout: RQ job timeout
            enabled: When False every message is dropped with a debug log
            session_factory: Session factory for the in-app channel in sync mode
        """
        self.channels = channels if channels is not None else ['in_app']
        self.recipients = recipients or {}
        self.enabled = enabled
        self.job_timeout = job_timeout
        self.session_factory = session_factory
        self.redis_url = redis_url or os.environ.get('REDIS_URL', 'redis://localhost:6379/0')

        if not use_async_queue:
            logger.info("Async queue disabled via config. Using sync mode.")
            self.redis_conn = None
            self.queue = None
            self.async_mode = False
        else:
            try:
                self.redis_conn = Redis.from_url(self.redis_url)
                self.redis_conn.ping()
                self.queue = Queue(queue_name, connection=self.redis_conn)
                self.async_mode = True
                logger.info("Notification service connected to Redis")
            except (RedisError, ValueError) as e:
                logger.error(f"Redis connection failed: {e}. Falling back to sync mode.")
                self.redis_conn = None
                self.queue = None
                self.async_mode = False

    @classmethod
    def from_config(cls, config: NotificationConfig, session_factory=None) -> "NotificationService":
        return cls(
            channels=config.enabled_channels(),
            recipients={
                name: channel.recipient
                for name, channel in config.channels.items()
                if channel.recipient
            },
            redis_url=config.redis_url,
            use_async_queue=config.use_async_queue,
            queue_name=config.queue_name,
            job_timeout=config.job_timeout,
            enabled=config.enabled,
            session_factory=session_factory,
        )

    def _build_payload(self, message: NotificationMessage) -> Dict[str, Any]:
        return {
            'notification_id': str(uuid.uuid4()),
            'message': message.to_dict(),
            'channels': list(self.channels),
            'recipients': dict(self.recipients),
        }

    def dispatch(self, message: NotificationMessage) -> Optional[str]:
        """
        Queue or deliver one message.

        Returns:
            The RQ job id or notification id, None when dropped or failed
        """
        if not self.enabled:
            logger.debug(f"Notifications disabled; dropping {message.type} for user {message.user_id}")
            return None

        payload = self._build_payload(message)
        try:
            if self.async_mode:
                job = self.queue.enqueue(
                    process_notification_task,
                    payload,
                    job_timeout=self.job_timeout,
                    result_ttl=86400,
                    retry=Retry(max=3, interval=[30, 60, 120])
                )
                logger.info(f"Queued {message.type} notification as job {job.id}")
                return job.id
            return process_notification_task(payload, session_factory=self.session_factory)
        except Exception as e:
            logger.error(f"Failed to dispatch {message.type} notification for user {message.user_id}: {e}",
                         exc_info=True)
            return None

    def dispatch_all(self, messages: Iterable[NotificationMessage]) -> List[Optional[str]]:
        return [self.dispatch(message) for message in messages]

    def notify(
        self,
        user_id: Any,
        type: str,
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        """Fire-and-forget delivery outside a unit of work."""
        return self.dispatch(NotificationMessage(str(user_id), type, title, body, data or {}))

    def get_queue_status(self) -> Dict[str, Any]:
        if not self.async_mode:
            return {'status': 'sync_mode', 'queue_length': 0}

        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except RedisError as e:
            return {'status': 'error', 'error': str(e)}


# Worker task - must be at module level for RQ
def process_notification_task(notification_data: Dict[str, Any], session_factory=None) -> str:
    """
    Deliver one message to each of its channels (called by RQ worker).

    A failing channel is logged and does not stop the others.
    """
    notification_id = notification_data.get('notification_id') or str(uuid.uuid4())
    message = notification_data['message']
    recipients = notification_data.get('recipients') or {}

    metadata = {
        'type': message['type'],
        'user_id': message['user_id'],
        'data': message.get('data') or {},
    }

    for channel_type in notification_data.get('channels') or []:
        recipient = recipients.get(channel_type) or message['user_id']
        logger.info(f"Processing notification {notification_id} via {channel_type}")
        try:
            channel = NotificationChannelFactory.get_channel(channel_type, session_factory=session_factory)
            success = channel.send(recipient, message['title'], message['body'], metadata)
        except Exception as e:
            logger.error(f"Failed to process notification {notification_id} via {channel_type}: {e}",
                         exc_info=True)
            continue

        if success:
            logger.info(f"Notification {notification_id} sent via {channel_type}")
        else:
            logger.error(f"Notification {notification_id} failed to send via {channel_type}")

    return notification_id
