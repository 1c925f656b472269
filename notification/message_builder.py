from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class NotificationContent(BaseModel):
    """Rendered notification: what the user sees, plus structured data for links."""
    type: str
    title: str
    body: str
    data: Dict[str, Any] = Field(default_factory=dict)


# Stage role -> (notification type, title, body template)
STAGE_TEMPLATES = {
    'screening': ('shortlisted', "Application Under Review", 'Your application for "{job_title}" is being reviewed'),
    'interview': ('shortlisted', "Interview Invitation",
                  'Congratulations! You\'ve been selected for an interview for "{job_title}"'),
    'offer': ('status_changed', "Offer Received", 'Great news! You\'ve received an offer for "{job_title}"'),
    'hired': ('status_changed', "You're Hired!", 'Congratulations! You\'ve been hired for "{job_title}"'),
    'rejected': ('rejected', "Application Update", 'Your application for "{job_title}" has been declined'),
}

FALLBACK_STAGE_TEMPLATE = (
    'status_changed', "Application Status Update", 'Your application status has been updated to "{stage_name}"'
)


class NotificationMessageBuilder:
    @staticmethod
    def stage_changed(
        role: Optional[str],
        job_title: str,
        stage_name: str,
        data: Optional[Dict[str, Any]] = None
    ) -> NotificationContent:
        """Candidate-facing message for an application entering ``stage_name``."""
        type_, title, template = STAGE_TEMPLATES.get(role, FALLBACK_STAGE_TEMPLATE)
        return NotificationContent(
            type=type_,
            title=title,
            body=template.format(job_title=job_title, stage_name=stage_name),
            data=data or {},
        )

    @staticmethod
    def new_match(score: int, job_title: str, data: Optional[Dict[str, Any]] = None) -> NotificationContent:
        return NotificationContent(
            type='new_match',
            title="New Job Match Found",
            body=f'You\'re a {score}% match for "{job_title}"',
            data=data or {},
        )

    @staticmethod
    def match_decision(decision: str, job_title: str, data: Optional[Dict[str, Any]] = None) -> NotificationContent:
        if decision == 'shortlisted':
            return NotificationContent(
                type='shortlisted',
                title="You've Been Shortlisted",
                body=f'You have been shortlisted for "{job_title}"',
                data=data or {},
            )
        return NotificationContent(
            type='rejected',
            title="Application Update",
            body=f'Your match for "{job_title}" was not taken forward',
            data=data or {},
        )

    @staticmethod
    def application_received(
        candidate_name: str,
        job_title: str,
        data: Optional[Dict[str, Any]] = None
    ) -> NotificationContent:
        return NotificationContent(
            type='application_received',
            title="New Application Received",
            body=f"{candidate_name} applied for {job_title}",
            data=data or {},
        )
