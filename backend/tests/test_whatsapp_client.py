from __future__ import annotations

import pytest

from service_orders.domain_errors import DomainError
from service_orders.services.whatsapp import WhatsAppClient, normalize_phone


class _Response:
    def __init__(self, status_code: int, payload: dict | None = None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload or {}
        self.text = str(self._payload)

    def json(self):
        return self._payload


class _SessionStub:
    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls: list[dict] = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        return self._responses.pop(0)


def _client(session) -> WhatsAppClient:
    return WhatsAppClient(phone_id="12345", token="secret", api_version="v18.0", session=session)


@pytest.mark.parametrize(
    ("destination", "expected"),
    [
        ("(11) 98888-7777", "5511988887777"),
        ("+55 11 98888-7777", "5511988887777"),
        ("5511988887777", "5511988887777"),
    ],
)
def test_normalize_phone(destination: str, expected: str) -> None:
    assert normalize_phone(destination) == expected


def test_send_pdf_uploads_media_then_sends_document() -> None:
    session = _SessionStub(_Response(200, {"id": "media-1"}), _Response(200, {"messages": [{"id": "m"}]}))

    _client(session).send_pdf(
        destination="(11) 98888-7777",
        content=b"%PDF",
        filename="servico-7.pdf",
        caption="Relatório do Serviço #7",
    )

    upload, message = session.calls
    assert upload["url"] == "https://graph.facebook.com/v18.0/12345/media"
    assert upload["headers"] == {"Authorization": "Bearer secret"}
    assert upload["data"]["messaging_product"] == "whatsapp"
    assert upload["files"]["file"] == ("servico-7.pdf", b"%PDF", "application/pdf")

    assert message["url"] == "https://graph.facebook.com/v18.0/12345/messages"
    assert message["json"]["to"] == "5511988887777"
    assert message["json"]["type"] == "document"
    assert message["json"]["document"] == {
        "id": "media-1",
        "filename": "servico-7.pdf",
        "caption": "Relatório do Serviço #7",
    }


def test_upload_rejection_stops_before_sending() -> None:
    session = _SessionStub(_Response(400, {"error": {"message": "bad file"}}))

    with pytest.raises(DomainError) as exc_info:
        _client(session).send_pdf(destination="11988887777", content=b"x", filename="f.pdf", caption="c")

    assert exc_info.value.code == "WHATSAPP_UPLOAD_FAILED"
    assert "bad file" in exc_info.value.message
    assert len(session.calls) == 1


def test_send_rejection_is_reported() -> None:
    session = _SessionStub(_Response(200, {"id": "media-1"}), _Response(401, {"error": {"message": "expired"}}))

    with pytest.raises(DomainError) as exc_info:
        _client(session).send_pdf(destination="11988887777", content=b"x", filename="f.pdf", caption="c")

    assert exc_info.value.code == "WHATSAPP_SEND_FAILED"


def test_unconfigured_client_fails_without_calls() -> None:
    session = _SessionStub()
    client = WhatsAppClient(phone_id=None, token=None, session=session)

    with pytest.raises(DomainError) as exc_info:
        client.send_pdf(destination="11988887777", content=b"x", filename="f.pdf", caption="c")

    assert exc_info.value.code == "WHATSAPP_NOT_CONFIGURED"
    assert session.calls == []


def test_upload_without_media_id_stops_before_sending() -> None:
    session = _SessionStub(_Response(200, {}))

    with pytest.raises(DomainError) as exc_info:
        _client(session).send_pdf(destination="11988887777", content=b"x", filename="f.pdf", caption="c")

    assert exc_info.value.code == "WHATSAPP_UPLOAD_FAILED"
    assert len(session.calls) == 1
