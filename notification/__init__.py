"""
Notification Module

Post-commit delivery of user notifications over pluggable channels, via
Redis Queue or in-process.

Usage:
    from notification import NotificationService, NotificationMessage

    service = NotificationService(use_async_queue=False)
    service.dispatch(NotificationMessage(user_id='...', type='new_match', title='...', body='...'))
"""

from notification.channels import (
    NotificationChannel,
    WebhookChannel,
    InAppChannel,
    NotificationChannelFactory,
)

from notification.message_builder import (
    NotificationContent,
    NotificationMessageBuilder,
)

from notification.service import (
    NotificationMessage,
    NotificationService,
    process_notification_task,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'WebhookChannel',
    'InAppChannel',
    'NotificationChannelFactory',
    # Messages
    'NotificationContent',
    'NotificationMessageBuilder',
    # Service
    'NotificationMessage',
    'NotificationService',
    'process_notification_task',
]
