from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from structlog import get_logger

from app.dependencies.rate_limit import rate_limit
from app.dependencies.storage import get_storage
from app.schemas.inquiry import InquiryBody, InquiryCreate, InquiryResponse
from app.storage import Storage

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["inquiries"])


@router.post(
    "/properties/{id}/inquiries",
    response_model=InquiryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(times=5, seconds=60))],
)
async def create_inquiry(id: int, request: InquiryBody, store: Storage = Depends(get_storage)):
    try:
        if not await store.get_property(id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        inquiry = await store.create_inquiry(InquiryCreate(property_id=id, **request.model_dump()))
        logger.info("Inquiry created", property_id=id, inquiry_id=inquiry.id)
        return inquiry
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Create inquiry failed", property_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create inquiry")


@router.get("/properties/{id}/inquiries", response_model=List[InquiryResponse])
async def list_property_inquiries(id: int, store: Storage = Depends(get_storage)):
    try:
        return await store.get_inquiries_by_property(id)
    except Exception as e:
        logger.error("Fetch inquiries failed", property_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch inquiries")


@router.get("/seller/{seller_id}/inquiries", response_model=List[InquiryResponse])
async def list_seller_inquiries(seller_id: int, store: Storage = Depends(get_storage)):
    try:
        results = await store.get_inquiries_by_seller(seller_id)
        logger.info("Retrieved seller inquiries", seller_id=seller_id, result_count=len(results))
        return results
    except Exception as e:
        logger.error("Fetch seller inquiries failed", seller_id=seller_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch seller inquiries")


@router.patch("/inquiries/{id}/view", response_model=dict)
async def mark_inquiry_viewed(id: int, store: Storage = Depends(get_storage)):
    try:
        if not await store.mark_inquiry_as_viewed(id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Mark inquiry viewed failed", inquiry_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to mark inquiry as viewed")
