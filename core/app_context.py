from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.match_service import MatchService
from database.database import create_session_factory
from etl.ingest import MatrixIngestService
from notification.service import NotificationService
from pipeline.engine import PipelineEngine
from pipeline.registry import StageRegistry


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Services open their own unit of work per operation from
    ``session_factory``; nothing here holds a session.
    """
    config: AppConfig
    session_factory: sessionmaker
    match_service: MatchService
    stage_registry: StageRegistry
    pipeline_engine: PipelineEngine
    matrix_ingest: MatrixIngestService
    notification_service: Optional[NotificationService] = None

    @classmethod
    def build(cls, config: AppConfig, session_factory=None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Session factory (default: one bound to ``config.database.url``)

        Returns:
            Fully wired AppContext instance
        """
        if session_factory is None:
            session_factory = create_session_factory(config.database.url)

        notification_service = None
        if config.notifications.enabled:
            notification_service = NotificationService.from_config(config.notifications, session_factory)

        match_service = MatchService(config.scoring, session_factory, notification_service)
        stage_registry = StageRegistry(config.pipeline, session_factory)

        return cls(
            config=config,
            session_factory=session_factory,
            match_service=match_service,
            stage_registry=stage_registry,
            pipeline_engine=PipelineEngine(
                config.pipeline, stage_registry, session_factory, notification_service, match_service
            ),
            matrix_ingest=MatrixIngestService(session_factory, match_service),
            notification_service=notification_service,
        )
