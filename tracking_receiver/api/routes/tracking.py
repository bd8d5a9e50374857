from fastapi import APIRouter, Depends

from tracking_receiver.api.deps import get_lookup_service
from tracking_receiver.schemas.tracking import PublicTrackingRecordOut, TrackingProgressOut
from tracking_receiver.services.lookup_service import LookupService

router = APIRouter()


@router.get("/tracking/{tracking_number}", response_model=PublicTrackingRecordOut)
async def get_tracking(tracking_number: str, lookup: LookupService = Depends(get_lookup_service)):
    """Public tracking lookup. Customer email is never included."""
    return await lookup.get_by_tracking_number(tracking_number)


@router.get("/tracking/{tracking_number}/progress", response_model=TrackingProgressOut)
async def get_tracking_progress(tracking_number: str, lookup: LookupService = Depends(get_lookup_service)):
    return await lookup.get_progress(tracking_number)
