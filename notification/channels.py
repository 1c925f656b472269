#!/usr/bin/env python3
"""
Notification Channels

Each channel delivers a rendered notification to one destination:
- in_app: a Notification row the user reads in the product
- webhook: a JSON POST to a configured URL

Usage:
    from notification.channels import NotificationChannelFactory

    channel = NotificationChannelFactory.get_channel('in_app')
    channel.send(recipient, subject, body, metadata)
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import logging
import urllib.parse
import ipaddress
import socket

import requests

from database.database import db_session_scope
from database.repositories import NotificationRepository

logger = logging.getLogger(__name__)


def _validate_webhook_url(url: str) -> bool:
    """
    Validate webhook URL to prevent SSRF attacks.

    Checks:
    - Scheme is http or https
    - Hostname resolves to public IP (not private/loopback)
    """
    try:
        parsed = urllib.parse.urlparse(url)

        if parsed.scheme not in ('http', 'https'):
            logger.error(f"Invalid URL scheme: {parsed.scheme}")
            return False

        if not parsed.hostname:
            logger.error("URL missing hostname")
            return False

        try:
            addrinfo = socket.getaddrinfo(parsed.hostname, None)
            for _, _, _, _, sockaddr in addrinfo:
                ip = ipaddress.ip_address(sockaddr[0])
                if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local:
                    logger.error(f"URL resolves to private/reserved IP: {ip}")
                    return False
        except socket.gaierror:
            logger.error(f"Could not resolve hostname: {parsed.hostname}")
            return False

        return True
    except ValueError as e:
        logger.error(f"URL validation error: {e}")
        return False


class NotificationChannel(ABC):
    """Interface shared by all notification channels."""

    @property
    @abstractmethod
    def channel_type(self) -> str:
        """Return the channel type identifier."""
        pass

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """
        Send a notification through this channel.

        Args:
            recipient: Target recipient (user id for in_app, URL for webhook)
            subject: Notification title
            body: Notification body
            metadata: Notification type, user id and structured data

        Returns:
            True if sent successfully, False otherwise
        """
        pass

    def validate_config(self) -> bool:
        return True


class InAppChannel(NotificationChannel):
    """In-app notification channel (stores in database)."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory

    @property
    def channel_type(self) -> str:
        return 'in_app'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        with db_session_scope(self.session_factory) as session:
            notification = NotificationRepository(session).create(
                user_id=recipient,
                type=metadata.get('type', 'status_changed'),
                title=subject,
                body=body,
                data=metadata.get('data') or {},
            )
        logger.info(f"[IN_APP] Stored notification {notification.id} for user {recipient}: {subject}")
        return True


class WebhookChannel(NotificationChannel):
    """Generic webhook notification channel."""

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    @property
    def channel_type(self) -> str:
        return 'webhook'

    def send(self, recipient: str, subject: str, body: str, metadata: Dict[str, Any]) -> bool:
        """Send webhook POST request."""
        webhook_url = recipient
        if not webhook_url or not _validate_webhook_url(webhook_url):
            logger.error(f"Invalid or unsafe webhook URL: {webhook_url}")
            return False

        payload = {
            'type': metadata.get('type'),
            'user_id': metadata.get('user_id'),
            'title': subject,
            'body': body,
            'data': metadata.get('data') or {},
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
        headers = {
            'Content-Type': 'application/json',
            'User-Agent': 'TalentMatch-Notification-Service/1.0'
        }

        try:
            response = requests.post(webhook_url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to send webhook: {e}")
            return False

        parsed = urllib.parse.urlparse(webhook_url)
        logger.info(f"Webhook sent to {parsed.scheme}://{parsed.hostname}{parsed.path}")
        return True


class NotificationChannelFactory:
    """
    Factory for creating notification channels.

    New channels are added with register_channel() without touching callers.
    """

    _channels: Dict[str, type] = {
        'in_app': InAppChannel,
        'webhook': WebhookChannel,
    }

    @classmethod
    def get_channel(cls, channel_type: str, session_factory=None) -> NotificationChannel:
        """
        Get a channel instance by type.

        Raises:
            ValueError: If the channel type is unknown
        """
        channel_class = cls._channels.get(channel_type.lower())
        if channel_class is None:
            raise ValueError(
                f"Unknown channel type: {channel_type}. Available: {', '.join(cls.list_channels())}"
            )
        if channel_class is InAppChannel:
            return InAppChannel(session_factory=session_factory)
        return channel_class()

    @classmethod
    def register_channel(cls, channel_type: str, channel_class: type) -> None:
        if not issubclass(channel_class, NotificationChannel):
            raise ValueError("Channel class must extend NotificationChannel")
        cls._channels[channel_type.lower()] = channel_class
        logger.info(f"Registered notification channel: {channel_type}")

    @classmethod
    def list_channels(cls) -> list:
        return list(cls._channels.keys())
