from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from structlog import get_logger

from app.dependencies.rate_limit import rate_limit
from app.dependencies.storage import get_storage
from app.schemas.property import PropertyImageCreate, PropertyImageResponse
from app.services.uploads import UploadRejected, read_images, save_image
from app.storage import Storage

logger = get_logger()
router = APIRouter(prefix="/api/v1", tags=["images"])


@router.get("/properties/{id}/images", response_model=List[PropertyImageResponse])
async def list_images(id: int, store: Storage = Depends(get_storage)):
    try:
        return await store.get_property_images(id)
    except Exception as e:
        logger.error("List images failed", property_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch images")


@router.post(
    "/properties/{id}/images",
    response_model=List[PropertyImageResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit(times=10, seconds=60))],
)
async def upload_images(
    id: int,
    images: Optional[List[UploadFile]] = File(None),
    store: Storage = Depends(get_storage),
):
    try:
        if not await store.get_property(id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

        # Validate the whole batch before writing anything
        files = await read_images(images or [])

        saved = []
        for filename, content in files:
            url = await save_image(filename, content)
            saved.append(await store.add_property_image(PropertyImageCreate(property_id=id, image_url=url)))
        logger.info("Images uploaded", property_id=id, count=len(saved))
        return saved
    except UploadRejected as e:
        logger.warning("Image upload rejected", property_id=id, reason=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Image upload failed", property_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to upload images")


@router.delete("/property-images/{id}", response_model=dict)
async def delete_image(id: int, store: Storage = Depends(get_storage)):
    try:
        if not await store.delete_property_image(id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Delete image failed", image_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete image")


@router.patch("/properties/{property_id}/images/{id}/main", response_model=dict)
async def set_main_image(property_id: int, id: int, store: Storage = Depends(get_storage)):
    try:
        if not await store.set_main_property_image(id, property_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image or property not found")
        logger.info("Main image changed", property_id=property_id, image_id=id)
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Set main image failed", property_id=property_id, image_id=id, error=str(e), exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to set main image")
