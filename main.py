import logging
import sys
import argparse

from pydantic import ValidationError

from core.app_context import AppContext
from core.config_loader import load_config
from core.exceptions import ServiceException
from database.database import configure_database
from database.init_db import init_db
from database.uow import unit_of_work

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_recompute(ctx: AppContext, job_id=None, candidate_id=None) -> int:
    if job_id:
        report = ctx.match_service.recompute_for_job(job_id)
    elif candidate_id:
        report = ctx.match_service.recompute_for_candidate(candidate_id)
    else:
        with unit_of_work(ctx.session_factory) as uow:
            job_ids = uow.matrices.job_ids_with_matrix()
        logger.info(f"Recomputing matches for {len(job_ids)} jobs")
        total = 0
        for each_job_id in job_ids:
            total += len(ctx.match_service.recompute_for_job(each_job_id).scored)
        return total
    return len(report.scored)


def run_ingest(ctx: AppContext, kind: str, target_id: str, path: str) -> int:
    with open(path, 'r') as f:
        raw = f.read()
    if kind == 'candidate':
        _, report = ctx.matrix_ingest.store_candidate_matrix(target_id, raw)
    else:
        _, report = ctx.matrix_ingest.store_job_matrix(target_id, raw)
    return len(report.scored)


def main():
    parser = argparse.ArgumentParser(description='TalentMatch matching and pipeline engine')
    parser.add_argument('--config', default='config.yaml', help='Path to config file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')

    recompute = subparsers.add_parser('recompute', help='Recompute match scores')
    scope = recompute.add_mutually_exclusive_group()
    scope.add_argument('--job', help='Only this job')
    scope.add_argument('--candidate', help='Only this candidate')

    ingest = subparsers.add_parser('ingest', help='Store a generated matrix JSON file')
    ingest.add_argument('kind', choices=['candidate', 'job'])
    ingest.add_argument('id', help='Candidate or job id')
    ingest.add_argument('path', help='Matrix JSON file')

    worker = subparsers.add_parser('worker', help='Run the notification worker')
    worker.add_argument('--burst', action='store_true', help='Process all and exit')

    args = parser.parse_args()
    config = load_config(args.config)
    session_factory = configure_database(config.database.url)

    if args.command == 'init-db':
        init_db()
        logger.info("Database initialized")
        return

    if args.command == 'worker':
        from notification.worker import start_worker
        start_worker(burst=args.burst, queues=[config.notifications.queue_name],
                     redis_url=config.notifications.redis_url)
        return

    ctx = AppContext.build(config, session_factory)
    try:
        if args.command == 'recompute':
            scored = run_recompute(ctx, job_id=args.job, candidate_id=args.candidate)
            logger.info(f"Recomputed {scored} matches")
        elif args.command == 'ingest':
            scored = run_ingest(ctx, args.kind, args.id, args.path)
            logger.info(f"Stored {args.kind} matrix for {args.id}; re-scored {scored} matches")
    except (ServiceException, ValidationError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
