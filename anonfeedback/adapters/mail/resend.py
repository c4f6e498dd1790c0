"""
Resend email sender adapter - Implements EmailSender protocol.

Delivers transactional email through the Resend HTTP API using httpx.
Transport and API failures are logged and reported as a failed
EmailResult; they never raise into the domain.
"""

import logging

import httpx

from anonfeedback.domain.ports import EmailResult

logger = logging.getLogger(__name__)


class ResendEmailSender:
    """Resend API client implementing the EmailSender protocol."""

    BASE_URL = "https://api.resend.com"

    def __init__(
        self,
        api_key: str,
        from_address: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.from_address = from_address
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=30.0,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._http_client

    async def close(self) -> None:
        """Explicit cleanup method."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def send(self, to: str, subject: str, body: str) -> EmailResult:
        http = await self._get_http_client()
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "html": body,
        }

        try:
            response = await http.post("/emails", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Resend rejected email to %s: %s %s", to, e.response.status_code, e.response.text
            )
            return EmailResult(success=False, message="Failed to send verification email")
        except httpx.HTTPError as e:
            logger.error("Error sending verification email to %s: %s", to, e)
            return EmailResult(success=False, message="Failed to send verification email")

        try:
            email_id = response.json().get("id")
        except ValueError:
            email_id = None
        logger.info("Email to %s accepted by Resend (id=%s)", to, email_id)
        return EmailResult(success=True, message="Verification email sent successfully")
