"""Outbound account email.

Delivery is not wired to a mail provider; the default mailer writes the
message to the application log so local setups can follow reset links.
"""

import logging
from urllib.parse import urlencode

from storefront.config import settings

logger = logging.getLogger(__name__)


class LoggingMailer:
    """Mailer that records messages in the log instead of sending them"""

    def __init__(self, frontend_base_url: str = ""):
        self.frontend_base_url = (frontend_base_url or settings.FRONTEND_BASE_URL).rstrip("/")

    def reset_link(self, token: str) -> str:
        return f"{self.frontend_base_url}/reset-password?{urlencode({'token': token})}"

    def send_password_reset(self, email: str, token: str) -> None:
        logger.info("[EMAIL] Password reset link for %s: %s", email, self.reset_link(token))


mailer = LoggingMailer()
