"""Printable order report; the page the PDF renderer visits."""
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.aggregate import get_service_aggregate
from ..use_cases.order_dispatch import report_title

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix="/order", tags=["reports"])


@router.get("/service/{service_id}", response_class=HTMLResponse)
def service_report(service_id: int, request: Request, db: Session = Depends(get_db)):
    service = get_service_aggregate(db, service_id)
    return templates.TemplateResponse(
        request,
        "service_report.html",
        {"service": service, "title": report_title(service_id)},
    )
