"""Storage contract shared by the in-memory and relational backends.

Lookups that miss return ``None`` or ``False``; only infrastructure failures
and username conflicts raise.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from app.schemas.inquiry import InquiryCreate, InquiryResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyDetailResponse,
    PropertyFeaturesResponse,
    PropertyFeaturesUpdate,
    PropertyImageCreate,
    PropertyImageResponse,
    PropertyResponse,
    PropertyUpdate,
    SellerPropertyResponse,
)
from app.schemas.search import PropertyFilters
from app.schemas.user import UserCreate, UserInDB


class StorageError(Exception):
    """Base class for errors the store raises on purpose."""


class UsernameTakenError(StorageError):
    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username '{username}' is already taken")


class UnknownSellerError(StorageError):
    def __init__(self, seller_id: int):
        self.seller_id = seller_id
        super().__init__(f"Seller {seller_id} does not exist")


def utcnow() -> datetime:
    # Naive UTC so values round-trip through TIMESTAMP WITHOUT TIME ZONE unchanged
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Storage(ABC):
    async def startup(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    # Users
    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserInDB]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserInDB]: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> UserInDB: ...

    # Properties
    @abstractmethod
    async def get_properties(self, filters: Optional[PropertyFilters] = None) -> List[PropertyDetailResponse]: ...

    @abstractmethod
    async def get_property(self, property_id: int) -> Optional[PropertyDetailResponse]: ...

    @abstractmethod
    async def create_property(
        self, data: PropertyCreate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> PropertyResponse:
        """Insert the property, and its features row when ``features`` is given, as one step.

        Raises ``UnknownSellerError`` if ``data.seller_id`` names no user.
        """

    @abstractmethod
    async def update_property(
        self, property_id: int, data: PropertyUpdate, features: Optional[PropertyFeaturesUpdate] = None
    ) -> Optional[PropertyResponse]:
        """Merge the set fields and upsert ``features`` together; ``None`` if the property is missing.

        Raises ``UnknownSellerError`` when a new ``seller_id`` names no user.
        """

    @abstractmethod
    async def delete_property(self, property_id: int) -> bool:
        """Remove the property with its features, images and inquiries."""

    @abstractmethod
    async def increment_property_views(self, property_id: int) -> None: ...

    @abstractmethod
    async def get_properties_by_seller(self, seller_id: int) -> List[SellerPropertyResponse]: ...

    # Images
    @abstractmethod
    async def add_property_image(self, data: PropertyImageCreate) -> PropertyImageResponse:
        """The first image of a property is always main; a later image sent
        with ``is_main`` takes the flag from the current main image."""

    @abstractmethod
    async def get_property_images(self, property_id: int) -> List[PropertyImageResponse]: ...

    @abstractmethod
    async def delete_property_image(self, image_id: int) -> bool:
        """Deleting the main image promotes the first remaining one."""

    @abstractmethod
    async def set_main_property_image(self, image_id: int, property_id: int) -> bool: ...

    # Features
    @abstractmethod
    async def get_property_features(self, property_id: int) -> Optional[PropertyFeaturesResponse]: ...

    @abstractmethod
    async def update_property_features(
        self, property_id: int, data: PropertyFeaturesUpdate
    ) -> PropertyFeaturesResponse:
        """Upsert. Flags missing from ``data`` are False on creation and left
        untouched on update."""

    # Inquiries
    @abstractmethod
    async def create_inquiry(self, data: InquiryCreate) -> InquiryResponse: ...

    @abstractmethod
    async def get_inquiries_by_property(self, property_id: int) -> List[InquiryResponse]: ...

    @abstractmethod
    async def get_inquiries_by_seller(self, seller_id: int) -> List[InquiryResponse]: ...

    @abstractmethod
    async def mark_inquiry_as_viewed(self, inquiry_id: int) -> bool: ...
