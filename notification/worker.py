#!/usr/bin/env python3
"""
RQ worker that delivers queued TalentMatch notifications.

Queue name and Redis URL come from the ``notifications`` section of
config.yaml unless given on the command line.

Usage:
    python -m notification.worker
    python -m notification.worker --burst --verbose
    python -m notification.worker --config /etc/talentmatch/config.yaml
"""

import sys
import argparse
import logging
from typing import List, Optional

from redis import Redis
from redis.exceptions import RedisError
from rq import Worker

from core.config_loader import NotificationConfig, load_config
from database.database import configure_database

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


def start_worker(burst: bool = False, queues: Optional[List[str]] = None, redis_url: Optional[str] = None):
    """Run an RQ worker on the notification queue(s) until stopped (or drained in burst mode)."""
    queues = queues or [NotificationConfig().queue_name]
    redis_url = redis_url or DEFAULT_REDIS_URL

    logger.info(f"Starting notification worker on {', '.join(queues)} (burst={burst})")

    try:
        redis_conn = Redis.from_url(redis_url)
        redis_conn.ping()
    except RedisError as e:
        logger.error(f"Cannot reach Redis at {redis_url}: {e}")
        sys.exit(1)

    worker = Worker(queues, connection=redis_conn)
    try:
        worker.work(burst=burst)
    except KeyboardInterrupt:
        logger.info("Notification worker stopped")


def main():
    parser = argparse.ArgumentParser(description='TalentMatch notification worker')
    parser.add_argument('--config', default='config.yaml', help='Path to config file')
    parser.add_argument('--burst', action='store_true', help='Deliver everything queued, then exit')
    parser.add_argument('--queues', nargs='+', help='Override the configured queue name')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = load_config(args.config)
    configure_database(config.database.url)
    notifications = config.notifications
    start_worker(
        burst=args.burst,
        queues=args.queues or [notifications.queue_name],
        redis_url=notifications.redis_url,
    )


if __name__ == '__main__':
    main()
