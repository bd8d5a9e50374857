"""Order routes — webhook ingest and authenticated lookups."""

from fastapi import APIRouter, Depends, Query, Request

from tracking_receiver.api.deps import get_ingest_service, get_lookup_service, read_json_body, require_api_key
from tracking_receiver.domain.normalize import MAX_ORDER_ID
from tracking_receiver.schemas.tracking import IngestResponse, TrackingRecordOut, TrackingRecordPage
from tracking_receiver.services.ingest_service import IngestService
from tracking_receiver.services.lookup_service import LookupService

router = APIRouter()


@router.post("/orders", response_model=IngestResponse)
async def receive_order_webhook(
    request: Request,
    ingest: IngestService = Depends(get_ingest_service),
):
    """Receive an order tracking webhook and upsert it by order_id.

    The API key may be sent as the X-API-Key header or as an ``api_key``
    query/body parameter. The body is read raw so missing fields produce a
    400 naming them instead of a schema error.
    """
    body = await read_json_body(request)
    result = await ingest.ingest(request.headers, request.query_params, body)
    return IngestResponse(order_id=result.order_id)


@router.get(
    "/orders",
    response_model=TrackingRecordPage,
    dependencies=[Depends(require_api_key)],
)
async def list_orders(
    search: str | None = Query(default=None, description="Order ID, tracking number or email fragment"),
    order_id: int | None = Query(default=None, ge=0, le=MAX_ORDER_ID),
    tracking_number: str | None = None,
    customer_email: str | None = None,
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
    lookup: LookupService = Depends(get_lookup_service),
):
    """Paginated listing of tracking records, newest update first."""
    return await lookup.list_records(
        search=search,
        order_id=order_id,
        tracking_number=tracking_number,
        customer_email=customer_email,
        page=page,
        per_page=per_page,
    )


@router.get(
    "/orders/{order_id}",
    response_model=TrackingRecordOut,
    dependencies=[Depends(require_api_key)],
)
async def get_order(order_id: int, lookup: LookupService = Depends(get_lookup_service)):
    """Full tracking record, including customer email."""
    return await lookup.get_by_order_id(order_id)
