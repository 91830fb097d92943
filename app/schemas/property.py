from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

ListingType = Literal["For Sale", "For Rent"]
PropertyStatus = Literal["active", "draft", "sold", "rented"]

# Display names used by search filters and listing forms
FEATURE_FLAGS: Dict[str, str] = {
    "Pool": "has_pool",
    "Garden": "has_garden",
    "Garage": "has_garage",
    "Balcony": "has_balcony",
    "Air Conditioning": "has_air_conditioning",
    "Gym": "has_gym",
    "Security System": "has_security_system",
    "Fireplace": "has_fireplace",
}

CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")


def _quantize(value: Optional[Decimal], exp: Decimal) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(exp)


class PropertyCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0, description="Listing price, kept as a decimal to avoid float drift")
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    property_type: str = Field(..., min_length=1, description="House, Apartment, Condo, Townhouse, Land")
    listing_type: ListingType
    bedrooms: int = Field(..., ge=0)
    bathrooms: Decimal = Field(..., ge=0, description="Half baths allowed, e.g. 2.5")
    square_feet: int = Field(..., gt=0)
    year_built: Optional[int] = None
    status: PropertyStatus = "active"
    seller_id: int

    @field_validator("price")
    @classmethod
    def quantize_price(cls, v):
        return _quantize(v, CENTS)

    @field_validator("bathrooms")
    @classmethod
    def quantize_bathrooms(cls, v):
        return _quantize(v, TENTHS)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Modern Family Home",
                "description": "Beautiful modern family home in a quiet neighborhood.",
                "price": "425000",
                "address": "123 Main St",
                "city": "Austin",
                "state": "TX",
                "zip_code": "78701",
                "property_type": "House",
                "listing_type": "For Sale",
                "bedrooms": 3,
                "bathrooms": "2",
                "square_feet": 1850,
                "year_built": 2018,
                "status": "active",
                "seller_id": 1
            }
        }


class PropertyUpdate(BaseModel):
    """Partial update; only fields the caller sends are applied."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    address: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=1)
    zip_code: Optional[str] = Field(None, min_length=1)
    property_type: Optional[str] = Field(None, min_length=1)
    listing_type: Optional[ListingType] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[Decimal] = Field(None, ge=0)
    square_feet: Optional[int] = Field(None, gt=0)
    year_built: Optional[int] = None
    status: Optional[PropertyStatus] = None
    seller_id: Optional[int] = None

    @field_validator("price")
    @classmethod
    def quantize_price(cls, v):
        return _quantize(v, CENTS)

    @field_validator("bathrooms")
    @classmethod
    def quantize_bathrooms(cls, v):
        return _quantize(v, TENTHS)

    def changes(self) -> dict:
        data = self.model_dump(exclude_unset=True, exclude={"features"})
        # year_built is the only nullable column; other explicit nulls are ignored
        return {k: v for k, v in data.items() if v is not None or k == "year_built"}


class PropertyCreateRequest(PropertyCreate):
    features: Optional[List[str]] = Field(None, description="Feature names, e.g. ['Pool', 'Garage']")


class PropertyUpdateRequest(PropertyUpdate):
    features: Optional[List[str]] = None


class PropertyResponse(BaseModel):
    id: int
    title: str
    description: str
    price: Decimal
    address: str
    city: str
    state: str
    zip_code: str
    property_type: str
    listing_type: str
    bedrooms: int
    bathrooms: Decimal
    square_feet: int
    year_built: Optional[int] = None
    status: str
    views: int
    seller_id: int
    created_at: datetime
    updated_at: datetime

    # Both backends must report the same scale ("425000.00", "2.5")
    @field_validator("price")
    @classmethod
    def quantize_price(cls, v):
        return _quantize(v, CENTS)

    @field_validator("bathrooms")
    @classmethod
    def quantize_bathrooms(cls, v):
        return _quantize(v, TENTHS)

    class Config:
        from_attributes = True


class PropertyFeaturesUpdate(BaseModel):
    has_pool: Optional[bool] = None
    has_garden: Optional[bool] = None
    has_garage: Optional[bool] = None
    has_balcony: Optional[bool] = None
    has_air_conditioning: Optional[bool] = None
    has_gym: Optional[bool] = None
    has_security_system: Optional[bool] = None
    has_fireplace: Optional[bool] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PropertyFeaturesUpdate":
        """Every known flag is set: True if named, False otherwise."""
        wanted = set(names)
        return cls(**{flag: label in wanted for label, flag in FEATURE_FLAGS.items()})


class PropertyFeaturesResponse(BaseModel):
    id: int
    property_id: int
    has_pool: bool = False
    has_garden: bool = False
    has_garage: bool = False
    has_balcony: bool = False
    has_air_conditioning: bool = False
    has_gym: bool = False
    has_security_system: bool = False
    has_fireplace: bool = False

    class Config:
        from_attributes = True


class PropertyImageCreate(BaseModel):
    property_id: int
    image_url: str = Field(..., min_length=1)
    is_main: bool = False


class PropertyImageResponse(BaseModel):
    id: int
    property_id: int
    image_url: str
    is_main: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PropertyDetailResponse(PropertyResponse):
    images: List[PropertyImageResponse] = []
    features: Optional[PropertyFeaturesResponse] = None


class SellerPropertyResponse(PropertyResponse):
    inquiry_count: int = 0
