"""WhatsApp Cloud API client: media upload followed by a document message."""
from __future__ import annotations

import logging
import re

import requests

from ..domain_errors import DomainError

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com"


def normalize_phone(destination: str, country_code: str = "55") -> str:
    """Digits only, prefixed with the country code unless already present."""
    digits = re.sub(r"\D", "", destination)
    if digits.startswith(country_code):
        return digits
    return f"{country_code}{digits}"


def _error_body(response: requests.Response) -> str:
    try:
        return str(response.json())
    except ValueError:
        return response.text[:200]


class WhatsAppClient:
    def __init__(
        self,
        *,
        phone_id: str | None,
        token: str | None,
        api_version: str = "v18.0",
        country_code: str = "55",
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.phone_id = phone_id
        self.token = token
        self.api_version = api_version
        self.country_code = country_code
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return f"{GRAPH_API_URL}/{self.api_version}/{self.phone_id}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _ensure_configured(self) -> None:
        if not self.phone_id or not self.token:
            raise DomainError(
                code="WHATSAPP_NOT_CONFIGURED",
                http_status=500,
                message="WhatsApp is not configured (WHATSAPP_PHONE_ID / WHATSAPP_TOKEN)",
            )

    def upload_media(self, content: bytes, filename: str, mime_type: str = "application/pdf") -> str:
        """Upload a file and return its media id."""
        self._ensure_configured()
        try:
            response = self.session.post(
                f"{self.base_url}/media",
                headers=self._headers(),
                data={"messaging_product": "whatsapp", "type": mime_type},
                files={"file": (filename, content, mime_type)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DomainError(
                code="WHATSAPP_UPLOAD_FAILED",
                http_status=500,
                message=f"WhatsApp upload failed: {exc}",
            ) from exc

        if not response.ok:
            raise DomainError(
                code="WHATSAPP_UPLOAD_FAILED",
                http_status=500,
                message=f"WhatsApp upload failed: {_error_body(response)}",
            )

        try:
            media_id = response.json().get("id")
        except ValueError:
            media_id = None
        if not media_id:
            raise DomainError(
                code="WHATSAPP_UPLOAD_FAILED",
                http_status=500,
                message="WhatsApp upload did not return a media id",
            )
        return media_id

    def send_document(self, *, to: str, media_id: str, filename: str, caption: str) -> None:
        self._ensure_configured()
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "document",
            "document": {"id": media_id, "filename": filename, "caption": caption},
        }
        try:
            response = self.session.post(
                f"{self.base_url}/messages",
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise DomainError(
                code="WHATSAPP_SEND_FAILED",
                http_status=500,
                message=f"WhatsApp message failed: {exc}",
            ) from exc

        if not response.ok:
            raise DomainError(
                code="WHATSAPP_SEND_FAILED",
                http_status=500,
                message=f"WhatsApp message failed: {_error_body(response)}",
            )

    def send_pdf(self, *, destination: str, content: bytes, filename: str, caption: str) -> None:
        to = normalize_phone(destination, self.country_code)
        media_id = self.upload_media(content, filename)
        self.send_document(to=to, media_id=media_id, filename=filename, caption=caption)
        logger.info("whatsapp.sent file=%s to=%s", filename, to)
