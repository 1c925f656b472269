import yaml
import os
from typing import List, Optional, Dict
from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    url: str


class ScorerConfig(BaseModel):
    """
    Configuration for the match scorer.

    final = skill_baseline_weight * skills
            + (1 - skill_baseline_weight) * weighted(experience, domain, location)

    where the three secondary axes are weighted by the job's own declared
    weights, normalised to sum to one.
    """
    skill_baseline_weight: float = Field(default=0.5, ge=0.0, le=1.0)

    # Required coverage counts twice as much as preferred coverage
    required_weight: float = Field(default=2.0, ge=0.0)
    preferred_weight: float = Field(default=1.0, ge=0.0)

    # Ubiquitous tooling (git, jira, excel...) counts at a fraction of its weight
    generic_skill_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    exclude_soft_skills: bool = True

    same_country_location_score: float = Field(default=50.0, ge=0.0, le=100.0)

    # Notification / listing floors
    min_score_to_notify: int = 30
    min_score_to_list: int = 30


class StageTemplate(BaseModel):
    name: str
    color: str = "#6B7280"
    is_default: bool = False


def _default_stage_templates() -> List[StageTemplate]:
    return [
        StageTemplate(name="Applied", color="#6B7280", is_default=True),
        StageTemplate(name="Screening", color="#3B82F6"),
        StageTemplate(name="Interview", color="#8B5CF6"),
        StageTemplate(name="Offer", color="#F59E0B"),
        StageTemplate(name="Hired", color="#10B981"),
        StageTemplate(name="Rejected", color="#EF4444"),
    ]


class PipelineConfig(BaseModel):
    """
    Configuration for the stage registry and pipeline engine.
    """
    # Stage names (case-insensitive) that end progression; advance() refuses to leave them
    terminal_stage_names: List[str] = Field(default_factory=lambda: ["Hired", "Rejected"])

    # When True, forward moves may not skip stages. Backward moves are always allowed.
    enforce_stage_order: bool = False

    # Seeded for a company the first time its registry is read
    default_stages: List[StageTemplate] = Field(default_factory=_default_stage_templates)

    default_stage_color: str = "#6B7280"


class NotificationChannelConfig(BaseModel):
    """Configuration for a single notification channel."""
    enabled: bool = True
    recipient: Optional[str] = None  # webhook URL, etc.


class NotificationConfig(BaseModel):
    """
    Configuration for notifications.

    In-app delivery is always on; extra channels are opt-in.
    """
    enabled: bool = True

    channels: Dict[str, NotificationChannelConfig] = Field(
        default_factory=lambda: {'in_app': NotificationChannelConfig()}
    )

    # Redis queue settings
    use_async_queue: bool = True
    redis_url: Optional[str] = None
    queue_name: str = "notifications"
    job_timeout: str = "5m"

    def enabled_channels(self) -> List[str]:
        return [name for name, channel in self.channels.items() if channel.enabled]


class AppConfig(BaseModel):
    database: DatabaseConfig
    scoring: ScorerConfig = Field(default_factory=ScorerConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)


def load_config(config_path: str = "config.yaml") -> AppConfig:
    # If not found at relative path (e.g. running from root), try the repo root
    if not os.path.exists(config_path):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        config_path = os.path.join(base_dir, "..", "config.yaml")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Allow env var override for DB URL
    env_db_url = os.environ.get("DATABASE_URL")
    if env_db_url:
        data.setdefault('database', {})
        data['database']['url'] = env_db_url

    # Allow env var override for Redis URL
    env_redis_url = os.environ.get("REDIS_URL")
    if env_redis_url:
        if not data.get('notifications'):
            data['notifications'] = {}
        data['notifications']['redis_url'] = env_redis_url

    return AppConfig(**data)
