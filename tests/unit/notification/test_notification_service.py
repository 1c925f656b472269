#!/usr/bin/env python3
"""
Tests for the notification system.

Tests cover:
1. Message building for every event
2. Notification channels (in-app, webhook) and the channel factory
3. NotificationService dispatch in sync and queued mode

Usage:
    python -m pytest tests/unit/notification -v
"""

import unittest
import uuid
from unittest.mock import Mock, patch

import pytest
import requests
from redis.exceptions import RedisError

from core.config_loader import NotificationChannelConfig, NotificationConfig
from database.uow import unit_of_work
from notification import (
    InAppChannel,
    NotificationChannel,
    NotificationChannelFactory,
    NotificationMessage,
    NotificationMessageBuilder,
    NotificationService,
    WebhookChannel,
    process_notification_task,
)
from notification.worker import start_worker
from tests import make_session_factory


class TestMessageBuilder(unittest.TestCase):

    def test_stage_changed_uses_role_template(self):
        content = NotificationMessageBuilder.stage_changed('interview', "Backend Engineer", "Tech Interview")
        self.assertEqual(content.type, 'shortlisted')
        self.assertEqual(content.title, "Interview Invitation")
        self.assertIn('"Backend Engineer"', content.body)

    def test_stage_changed_without_role(self):
        content = NotificationMessageBuilder.stage_changed(None, "Backend Engineer", "Take-home")
        self.assertEqual(content.type, 'status_changed')
        self.assertEqual(content.body, 'Your application status has been updated to "Take-home"')

    def test_new_match(self):
        content = NotificationMessageBuilder.new_match(82, "Data Engineer", data={'match_id': 'm1'})
        self.assertEqual(content.type, 'new_match')
        self.assertEqual(content.body, 'You\'re a 82% match for "Data Engineer"')
        self.assertEqual(content.data, {'match_id': 'm1'})

    def test_match_decision(self):
        self.assertEqual(NotificationMessageBuilder.match_decision('shortlisted', "SRE").type, 'shortlisted')
        self.assertEqual(NotificationMessageBuilder.match_decision('rejected', "SRE").type, 'rejected')


class TestNotificationChannels(unittest.TestCase):

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_send_success(self, mock_post, mock_validate):
        mock_post.return_value.raise_for_status = Mock()

        channel = WebhookChannel()
        result = channel.send(
            recipient='https://hooks.example.com/talent',
            subject='New Job Match Found',
            body='Body',
            metadata={'type': 'new_match', 'user_id': 'u1', 'data': {'score': 82}}
        )

        self.assertTrue(result)
        call_args = mock_post.call_args
        self.assertEqual(call_args[0][0], 'https://hooks.example.com/talent')
        payload = call_args[1]['json']
        self.assertEqual(payload['type'], 'new_match')
        self.assertEqual(payload['data'], {'score': 82})
        self.assertEqual(call_args[1]['timeout'], 30)

    @patch('notification.channels._validate_webhook_url', return_value=True)
    @patch('notification.channels.requests.post')
    def test_webhook_send_failure(self, mock_post, mock_validate):
        mock_post.side_effect = requests.ConnectionError('Network error')

        result = WebhookChannel().send('https://hooks.example.com/talent', 'Test', 'Body', {})

        self.assertFalse(result)

    @patch('notification.channels.requests.post')
    def test_webhook_rejects_private_address(self, mock_post):
        result = WebhookChannel().send('http://127.0.0.1:8080/hook', 'Test', 'Body', {})

        self.assertFalse(result)
        mock_post.assert_not_called()

    def test_webhook_rejects_non_http_scheme(self):
        self.assertFalse(WebhookChannel().send('file:///etc/passwd', 'Test', 'Body', {}))

    @pytest.mark.db
    def test_in_app_stores_notification(self):
        session_factory = make_session_factory()
        user_id = uuid.uuid4()

        result = InAppChannel(session_factory).send(
            str(user_id), 'Offer Received', 'Body', {'type': 'status_changed', 'data': {'stage_name': 'Offer'}}
        )

        self.assertTrue(result)
        with unit_of_work(session_factory) as uow:
            stored = uow.notifications.list_for_user(user_id)
            self.assertEqual(len(stored), 1)
            self.assertEqual(stored[0].type, 'status_changed')
            self.assertFalse(stored[0].read)


class TestChannelFactory(unittest.TestCase):

    def setUp(self):
        self.original_channels = dict(NotificationChannelFactory._channels)

    def tearDown(self):
        NotificationChannelFactory._channels = self.original_channels

    def test_known_channels(self):
        self.assertIsInstance(NotificationChannelFactory.get_channel('in_app'), InAppChannel)
        self.assertIsInstance(NotificationChannelFactory.get_channel('WEBHOOK'), WebhookChannel)
        self.assertEqual(sorted(NotificationChannelFactory.list_channels()), ['in_app', 'webhook'])

    def test_unknown_channel(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.get_channel('carrier_pigeon')

    def test_register_channel(self):
        class SmsChannel(NotificationChannel):
            channel_type = 'sms'

            def send(self, recipient, subject, body, metadata):
                return True

        NotificationChannelFactory.register_channel('sms', SmsChannel)

        self.assertIsInstance(NotificationChannelFactory.get_channel('sms'), SmsChannel)

    def test_register_rejects_non_channel(self):
        with self.assertRaises(ValueError):
            NotificationChannelFactory.register_channel('bad', dict)


class TestNotificationService(unittest.TestCase):

    def setUp(self):
        self.message = NotificationMessage(
            user_id=str(uuid.uuid4()),
            type='new_match',
            title='New Job Match Found',
            body='You\'re a 82% match for "Data Engineer"',
            data={'score': 82},
        )

    @patch('notification.service.Queue')
    @patch('notification.service.Redis')
    def test_async_dispatch_enqueues(self, mock_redis, mock_queue_class):
        mock_redis.from_url.return_value.ping.return_value = True
        mock_job = Mock()
        mock_job.id = 'job-123'
        mock_queue_class.return_value.enqueue.return_value = mock_job

        service = NotificationService(redis_url='redis://localhost:6379/0')
        result = service.dispatch(self.message)

        self.assertTrue(service.async_mode)
        self.assertEqual(result, 'job-123')
        args, kwargs = mock_queue_class.return_value.enqueue.call_args
        self.assertIs(args[0], process_notification_task)
        self.assertEqual(args[1]['message']['type'], 'new_match')
        self.assertEqual(args[1]['channels'], ['in_app'])
        self.assertEqual(kwargs['retry'].max, 3)

    @patch('notification.service.Redis')
    def test_redis_unavailable_falls_back_to_sync(self, mock_redis):
        mock_redis.from_url.return_value.ping.side_effect = RedisError('connection refused')

        service = NotificationService(redis_url='redis://localhost:6379/0')

        self.assertFalse(service.async_mode)
        self.assertEqual(service.get_queue_status(), {'status': 'sync_mode', 'queue_length': 0})

    @pytest.mark.db
    def test_sync_dispatch_delivers_in_process(self):
        session_factory = make_session_factory()
        service = NotificationService(use_async_queue=False, session_factory=session_factory)

        self.assertIsNotNone(service.dispatch(self.message))

        with unit_of_work(session_factory) as uow:
            stored = uow.notifications.list_for_user(self.message.user_id)
            self.assertEqual([n.body for n in stored], [self.message.body])
            self.assertEqual(stored[0].data, {'score': 82})

    @patch('notification.service.NotificationChannelFactory.get_channel')
    def test_failing_channel_does_not_stop_others(self, mock_get_channel):
        broken = Mock()
        broken.send.side_effect = RuntimeError('boom')
        working = Mock()
        working.send.return_value = True
        mock_get_channel.side_effect = [broken, working]
        service = NotificationService(channels=['in_app', 'webhook'], use_async_queue=False)

        with self.assertLogs('notification.service', level='ERROR'):
            result = service.dispatch(self.message)

        self.assertIsNotNone(result)
        working.send.assert_called_once()

    def test_recipient_override_per_channel(self):
        payload = {
            'message': self.message.to_dict(),
            'channels': ['webhook'],
            'recipients': {'webhook': 'https://hooks.example.com/talent'},
        }
        with patch('notification.service.NotificationChannelFactory.get_channel') as mock_get_channel:
            process_notification_task(payload)

        mock_get_channel.return_value.send.assert_called_once_with(
            'https://hooks.example.com/talent', self.message.title, self.message.body,
            {'type': 'new_match', 'user_id': self.message.user_id, 'data': {'score': 82}}
        )

    def test_disabled_service_drops_messages(self):
        service = NotificationService(use_async_queue=False, enabled=False)

        with patch('notification.service.process_notification_task') as mock_process:
            self.assertIsNone(service.dispatch(self.message))
        mock_process.assert_not_called()

    def test_dispatch_all(self):
        service = NotificationService(use_async_queue=False)
        with patch.object(service, 'dispatch', side_effect=['a', None]) as mock_dispatch:
            self.assertEqual(service.dispatch_all([self.message, self.message]), ['a', None])
        self.assertEqual(mock_dispatch.call_count, 2)

    def test_notify_builds_message(self):
        service = NotificationService(use_async_queue=False)
        user_id = uuid.uuid4()

        with patch.object(service, 'dispatch', return_value='n1') as mock_dispatch:
            result = service.notify(user_id, 'status_changed', 'Title', 'Body')

        self.assertEqual(result, 'n1')
        message = mock_dispatch.call_args[0][0]
        self.assertEqual(message.user_id, str(user_id))
        self.assertEqual(message.data, {})

    def test_from_config(self):
        config = NotificationConfig(
            use_async_queue=False,
            channels={
                'in_app': NotificationChannelConfig(),
                'webhook': NotificationChannelConfig(recipient='https://hooks.example.com/talent'),
                'sms': NotificationChannelConfig(enabled=False),
            },
        )

        service = NotificationService.from_config(config)

        self.assertEqual(service.channels, ['in_app', 'webhook'])
        self.assertEqual(service.recipients, {'webhook': 'https://hooks.example.com/talent'})
        self.assertFalse(service.async_mode)



class TestWorker(unittest.TestCase):

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_burst_run_on_default_queue(self, mock_redis, mock_worker_class):
        start_worker(burst=True)

        mock_redis.from_url.assert_called_once_with('redis://localhost:6379/0')
        self.assertEqual(mock_worker_class.call_args[0][0], ['notifications'])
        mock_worker_class.return_value.work.assert_called_once_with(burst=True)

    @patch('notification.worker.Worker')
    @patch('notification.worker.Redis')
    def test_unreachable_redis_exits(self, mock_redis, mock_worker_class):
        mock_redis.from_url.return_value.ping.side_effect = RedisError('connection refused')

        with self.assertRaises(SystemExit):
            start_worker(redis_url='redis://cache:6379/1')
        mock_worker_class.assert_not_called()


if __name__ == '__main__':
    unittest.main()
