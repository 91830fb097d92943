from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from structlog import get_logger

from app.dependencies.rate_limit import rate_limit
from app.dependencies.storage import get_storage
from app.schemas.property import (
    PropertyCreate,
    PropertyCreateRequest,
    PropertyDetailResponse,
    PropertyFeaturesUpdate,
    PropertyResponse,
    PropertyUpdateRequest,
    SellerPropertyResponse,
)
from app.schemas.search import PropertyFilters
from app.storage import Storage, UnknownSellerError

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["properties"])


def property_filters(
    location: Optional[str] = None,
    property_type: Optional[str] = None,
    listing_type: Optional[str] = None,
    status: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    min_bedrooms: Optional[str] = None,
    min_bathrooms: Optional[str] = None,
    min_square_feet: Optional[str] = None,
    min_year_built: Optional[str] = None,
    features: Optional[str] = Query(None, description="Comma-separated feature names, e.g. Pool,Garage"),
) -> PropertyFilters:
    # Numbers stay raw here so PropertyFilters can treat "" and "any" as unset
    try:
        return PropertyFilters(
            location=location,
            property_type=property_type,
            listing_type=listing_type,
            status=status,
            min_price=min_price,
            max_price=max_price,
            min_bedrooms=min_bedrooms,
            min_bathrooms=min_bathrooms,
            min_square_feet=min_square_feet,
            min_year_built=min_year_built,
            features=features.split(",") if features else None,
        )
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("query", *err["loc"])} for err in e.errors(include_url=False)]
        )


@router.get("/properties", response_model=List[PropertyDetailResponse], dependencies=[Depends(rate_limit(times=60, seconds=60))])
async def list_properties(filters: PropertyFilters = Depends(property_filters), store: Storage = Depends(get_storage)):
    logger.info("Received property search", filters=filters.model_dump(exclude_none=True))

    if filters.min_price is not None and filters.max_price is not None and filters.min_price > filters.max_price:
        logger.warning("Invalid price range", min_price=str(filters.min_price), max_price=str(filters.max_price))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="min_price cannot be greater than max_price")

    try:
        results = await store.get_properties(filters)
        logger.info("Property search completed", result_count=len(results))
        return results
    except Exception as e:
        logger.error("Property search failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch properties")


@router.get("/properties/{id}", response_model=PropertyDetailResponse)
async def get_property(id: int, store: Storage = Depends(get_storage)):
    try:
        # A miss is a silent no-op, so bump first and return the fresh count
        await store.increment_property_views(id)
        item = await store.get_property(id)
        if not item:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        return item
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Get property failed", id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch property")


@router.post(
    "/properties",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(times=10, seconds=60))],
)
async def create_property(request: PropertyCreateRequest, store: Storage = Depends(get_storage)):
    features = PropertyFeaturesUpdate.from_names(request.features) if request.features is not None else None
    try:
        prop = await store.create_property(PropertyCreate(**request.model_dump(exclude={"features"})), features)
        logger.info("Property created", property_id=prop.id, seller_id=prop.seller_id)
        return prop
    except UnknownSellerError as e:
        logger.warning("Create property for unknown seller", seller_id=e.seller_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("Create property failed", error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create property")


@router.patch("/properties/{id}", response_model=PropertyResponse, dependencies=[Depends(rate_limit(times=30, seconds=60))])
async def update_property(id: int, request: PropertyUpdateRequest, store: Storage = Depends(get_storage)):
    features = PropertyFeaturesUpdate.from_names(request.features) if request.features is not None else None
    try:
        prop = await store.update_property(id, request, features)
        if not prop:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        logger.info("Property updated", property_id=id, fields=sorted(request.changes()))
        return prop
    except HTTPException:
        raise
    except UnknownSellerError as e:
        logger.warning("Update property to unknown seller", property_id=id, seller_id=e.seller_id)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error("Update property failed", id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update property")


@router.delete("/properties/{id}", response_model=dict, dependencies=[Depends(rate_limit(times=30, seconds=60))])
async def delete_property(id: int, store: Storage = Depends(get_storage)):
    try:
        if not await store.delete_property(id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Delete property failed", id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete property")


@router.get("/seller/{seller_id}/properties", response_model=List[SellerPropertyResponse])
async def list_seller_properties(seller_id: int, store: Storage = Depends(get_storage)):
    try:
        results = await store.get_properties_by_seller(seller_id)
        logger.info("Retrieved seller properties", seller_id=seller_id, result_count=len(results))
        return results
    except Exception as e:
        logger.error("Failed to retrieve seller properties", seller_id=seller_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch seller properties")
