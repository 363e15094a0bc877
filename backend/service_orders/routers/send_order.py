"""Report delivery endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_dispatcher
from ..responses import success_response
from ..schemas import SendOrderRequest
from ..use_cases.order_dispatch import OrderDispatcher, send_order_use_case

router = APIRouter(prefix="/send_order", tags=["send_order"])


@router.post("")
def send_order(
    data: SendOrderRequest,
    db: Session = Depends(get_db),
    dispatcher: OrderDispatcher = Depends(get_dispatcher),
):
    """Render the order report to PDF and deliver it by e-mail or WhatsApp."""
    send_order_use_case(db=db, dispatcher=dispatcher, data=data)
    return success_response()
