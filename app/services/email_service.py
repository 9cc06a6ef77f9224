import logging
import re
from typing import Iterable, List, Union

import requests

from app.config import settings

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def _recipients(to: Union[str, Iterable[str]]) -> List[str]:
    # ADMIN_EMAIL may hold several addresses separated by commas
    if isinstance(to, str):
        to = to.split(",")
    return [e.strip() for e in to if e and EMAIL_PATTERN.fullmatch(e.strip())]


def send_email(to: Union[str, List[str]], subject: str, html: str) -> bool:
    """
    Send a transactional email through Brevo.

    Returns False instead of raising so a mail outage never rolls back
    the order operation that triggered it.
    """
    recipients = _recipients(to)
    if not recipients:
        logger.warning(f"No valid recipient for '{subject}': {to}")
        return False

    if not settings.BREVO_API_KEY:
        logger.info(f"BREVO_API_KEY not configured, skipping email '{subject}'")
        return False

    try:
        response = requests.post(
            BREVO_API_URL,
            json={
                "sender": {"email": settings.MAIL_FROM, "name": settings.STORE_NAME},
                "to": [{"email": e} for e in recipients],
                "subject": subject,
                "htmlContent": html,
            },
            headers={"api-key": settings.BREVO_API_KEY, "accept": "application/json"},
            timeout=10,
        )
    except requests.RequestException:
        logger.exception(f"Brevo request for '{subject}' failed")
        return False

    if not response.ok:
        logger.error(f"Brevo rejected '{subject}' ({response.status_code}): {response.text}")
        return False

    logger.info(f"Email '{subject}' sent to {', '.join(recipients)}")
    return True
