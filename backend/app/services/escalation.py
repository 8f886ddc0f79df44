"""Out-of-band escalation notices (email relay)."""

import logging

import httpx

from app.config import get_settings
from app.models import Report, User

logger = logging.getLogger(__name__)
settings = get_settings()


class EscalationNotifier:
    """
    Sends an escalation notice for a report to an email relay webhook.

    Failures are logged and reported as False; escalation never blocks the
    administrator action that triggered it.
    """

    def __init__(
        self,
        webhook_url: str | None = settings.escalation_webhook_url,
        timeout: float = settings.escalation_timeout_seconds,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def build_payload(self, report: Report, reporter: User | None, reason: str | None) -> dict:
        subject = f"Escalated report #{report.id}: {report.title}"
        lines = [
            f"Report #{report.id} ({report.category or 'uncategorised'}) has been escalated.",
            f"Status: {report.status}",
            f"Location: {report.longitude}, {report.latitude}",
        ]
        if reason:
            lines.append(f"Reason: {reason}")
        return {
            "to": reporter.email if reporter else None,
            "subject": subject,
            "text": "\n".join(lines),
            "report_id": report.id,
        }

    async def send(self, report: Report, reporter: User | None, reason: str | None = None) -> bool:
        if not self.webhook_url:
            logger.warning(f"Escalation webhook not configured; notice for report {report.id} not sent")
            return False

        payload = self.build_payload(report, reporter, reason)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Escalation notice for report {report.id} rejected: {e.response.status_code}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Escalation notice for report {report.id} failed: {e}")
            return False

        logger.info(f"Escalation notice sent for report {report.id}")
        return True
