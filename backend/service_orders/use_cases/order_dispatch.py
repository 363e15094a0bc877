"""Render a service order report and deliver it by e-mail or WhatsApp."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from .. import repository
from ..domain_errors import not_found, validation_error
from ..schemas import SendOrderRequest
from ..services.mailer import Mailer
from ..services.report_renderer import RenderOptions, ReportRenderer
from ..services.whatsapp import WhatsAppClient

logger = logging.getLogger(__name__)

EMAIL_CHANNEL = "email"
WHATSAPP_CHANNEL = "whatsapp"
CHANNELS = (EMAIL_CHANNEL, WHATSAPP_CHANNEL)

EMAIL_BODY = "Segue em anexo o relatório solicitado."


def report_filename(service_id: int) -> str:
    return f"servico-{service_id}.pdf"


def report_title(service_id: int) -> str:
    return f"Relatório do Serviço #{service_id}"


@dataclass
class OrderDispatcher:
    """Delivery collaborators wired once at startup."""

    renderer: ReportRenderer
    mailer: Mailer
    messenger: WhatsAppClient
    report_base_url: str
    render_options: RenderOptions = field(default_factory=RenderOptions)

    def report_url(self, service_id: int) -> str:
        return f"{self.report_base_url.rstrip('/')}/order/service/{service_id}"

    def render(self, service_id: int) -> bytes:
        return self.renderer.render(self.report_url(service_id), self.render_options)


def send_order_use_case(*, db: Session, dispatcher: OrderDispatcher, data: SendOrderRequest) -> None:
    """Single pass, no retries: any failing step fails the request."""
    if not data.id or not data.channel or not data.destination:
        raise validation_error(
            "Invalid parameters: id, channel and destination are required",
            code="SEND_ORDER_INVALID",
        )
    channel = data.channel.strip().lower()
    if channel not in CHANNELS:
        raise validation_error(f"Invalid channel '{data.channel}'", code="SEND_ORDER_INVALID_CHANNEL")
    if not repository.services.exists(db, data.id):
        raise not_found("service", data.id)

    content = dispatcher.render(data.id)
    filename = report_filename(data.id)

    if channel == EMAIL_CHANNEL:
        dispatcher.mailer.send(
            to=data.destination,
            subject=report_title(data.id),
            body=EMAIL_BODY,
            attachment=content,
            filename=filename,
        )
    else:
        dispatcher.messenger.send_pdf(
            destination=data.destination,
            content=content,
            filename=filename,
            caption=report_title(data.id),
        )

    logger.info("send_order id=%s channel=%s", data.id, channel)
