"""
Operator notification for new waitlist signups.

The send runs as a detached asyncio task: the signup response never waits on
it and never sees its outcome. Failures end up in the log and nowhere else.
"""
import asyncio
from typing import Optional, Set

from core.config import NOTIFICATION_EMAIL, logger
from core.errors import NotificationError
from utils import emailing

NO_VARIANT_MARKER = "None"

# Strong refs so pending tasks are not garbage-collected mid-send
_pending: Set[asyncio.Task] = set()


def notifications_enabled() -> bool:
    return bool(NOTIFICATION_EMAIL) and (emailing.resend_configured() or emailing.smtp_configured())


def build_lead_message(name: str, email: str, variant: Optional[str]) -> dict:
    shown = variant or NO_VARIANT_MARKER
    ctx = {"name": name, "email": email, "variant": shown}
    return {
        "subject": f"New Waitlist Signup: {name}",
        "text": emailing.render_email("lead_notification.txt", **ctx),
        "html": emailing.render_email("lead_notification.html", **ctx),
    }


async def send_lead_notification(name: str, email: str, variant: Optional[str]) -> None:
    """Send one notification. Raises NotificationError on any failure."""
    if not notifications_enabled():
        return
    try:
        msg = build_lead_message(name, email, variant)
    except Exception as ex:
        raise NotificationError(f"render failed: {ex}") from ex

    if emailing.resend_configured():
        await emailing.send_email_resend(NOTIFICATION_EMAIL, msg["subject"], msg["html"], msg["text"])
    else:
        await asyncio.to_thread(emailing.send_email_smtp, NOTIFICATION_EMAIL, msg["subject"], msg["html"], msg["text"])
    logger.info("[notify] Lead notification email queued successfully.")


async def _notify_quietly(name: str, email: str, variant: Optional[str]) -> None:
    try:
        await send_lead_notification(name, email, variant)
    except NotificationError as ex:
        logger.error(f"[notify] Failed to send lead notification: {ex}")
    except Exception as ex:
        logger.exception(f"[notify] Unexpected notification error: {ex}")


def schedule_lead_notification(name: str, email: str, variant: Optional[str]) -> Optional[asyncio.Task]:
    """
    Fire-and-forget. Returns the task (mostly for tests) or None when
    notifications are not configured.
    """
    if not notifications_enabled():
        return None
    task = asyncio.create_task(_notify_quietly(name, email, variant))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task


async def drain_pending() -> None:
    """Wait for in-flight notifications (used at shutdown)."""
    if _pending:
        await asyncio.gather(*list(_pending), return_exceptions=True)
