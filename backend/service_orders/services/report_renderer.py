"""Client for the external headless-browser renderer (Gotenberg Chromium URL route)."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from ..domain_errors import DomainError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOptions:
    """Print layout: fixed paper size and margins, in inches."""

    paper_width: float = 8.27
    paper_height: float = 11.7
    margin: float = 0.39
    print_background: bool = True

    def as_form(self) -> dict[str, str]:
        margin = str(self.margin)
        return {
            "paperWidth": str(self.paper_width),
            "paperHeight": str(self.paper_height),
            "marginTop": margin,
            "marginBottom": margin,
            "marginLeft": margin,
            "marginRight": margin,
            "printBackground": "true" if self.print_background else "false",
            "emulatedMediaType": "print",
            # Wait for network idle so client-side data has loaded.
            "skipNetworkIdleEvent": "false",
        }


class ReportRenderer:
    """``render(url, options) -> PDF bytes`` with a bounded wait."""

    def __init__(self, base_url: str, *, timeout: float = 60, session: requests.Session | None = None) -> None:
        self.endpoint = f"{base_url.rstrip('/')}/forms/chromium/convert/url"
        self.timeout = timeout
        self.session = session or requests.Session()

    def render(self, url: str, options: RenderOptions | None = None) -> bytes:
        options = options or RenderOptions()
        fields = {"url": url, **options.as_form()}
        try:
            # Sent as multipart/form-data, which the renderer requires.
            response = self.session.post(
                self.endpoint,
                files={name: (None, value) for name, value in fields.items()},
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise DomainError(
                code="REPORT_RENDER_TIMEOUT",
                http_status=500,
                message=f"Report rendering timed out after {self.timeout:g}s",
            ) from exc
        except requests.RequestException as exc:
            raise DomainError(
                code="REPORT_RENDER_FAILED",
                http_status=500,
                message=f"Report rendering failed: {exc}",
            ) from exc

        if response.status_code != 200:
            raise DomainError(
                code="REPORT_RENDER_FAILED",
                http_status=500,
                message=f"Report rendering failed: HTTP_{response.status_code}: {response.text[:200]}",
            )

        logger.info("report.render url=%s bytes=%d", url, len(response.content))
        return response.content
