"""
Outbound mail hook.

Delivery itself belongs to an external mail service; the default notifier
only logs what would be sent. Sending is best effort: send() reports
failure through its return value and never raises.
"""

from jobboard.core.config import get_settings
from jobboard.core.logging import get_logger

logger = get_logger(__name__)


class Notifier:
    """Interface for outbound messages."""

    def send(self, to: str, subject: str, body: str) -> bool:
        raise NotImplementedError


class LogNotifier(Notifier):
    """Writes outgoing mail to the log instead of delivering it."""

    def __init__(self, sender: str = None, enabled: bool = True):
        self.sender = sender
        self.enabled = enabled

    def send(self, to: str, subject: str, body: str) -> bool:
        if not to:
            logger.warning("send: missing recipient | subject=%s", subject)
            return False
        if not self.enabled:
            logger.info("[notifications disabled] would send: %s | %s", to, subject)
            return True
        logger.info("Mail from %s to %s | subject=%s | %s", self.sender, to, subject, body)
        return True


_notifier: Notifier = None


def get_notifier() -> Notifier:
    """Process-wide notifier. Also used as a FastAPI dependency."""
    global _notifier
    if _notifier is None:
        settings = get_settings()
        _notifier = LogNotifier(sender=settings.mail_sender, enabled=settings.notifications_enabled)
    return _notifier


def notify_interview_scheduled(
    notifier: Notifier,
    applicant: dict,
    interviewer_name: str,
    interview_time: str,
    job_title: str = None,
) -> int:
    """
    Tell the applicant and the interviewer about a new interview.

    Returns how many messages were accepted by the notifier.
    """
    role = job_title or "your application"
    sent = 0
    messages = [
        (
            applicant.get("email"),
            f"Interview scheduled: {role}",
            f"Hi {applicant.get('name') or 'there'}, your interview with {interviewer_name} "
            f"is scheduled for {interview_time}.",
        ),
        (
            interviewer_name,
            f"Interview assigned: {role}",
            f"You are interviewing {applicant.get('name') or applicant.get('_id')} at {interview_time}.",
        ),
    ]
    for to, subject, body in messages:
        try:
            if notifier.send(to, subject, body):
                sent += 1
        except Exception:
            logger.exception("Notification to %s failed", to)
    return sent
