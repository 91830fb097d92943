from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, Text
# Import Base from the common models file
from app.models import Base

class Property(Base):
    __tablename__ = "properties"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    state = Column(Text, nullable=False)
    zip_code = Column(Text, nullable=False)
    property_type = Column(Text, nullable=False)  # House, Apartment, Condo, Townhouse, Land
    listing_type = Column(Text, nullable=False)  # For Sale, For Rent
    bedrooms = Column(Integer, nullable=False)
    bathrooms = Column(Numeric(3, 1), nullable=False)
    square_feet = Column(Integer, nullable=False)
    year_built = Column(Integer, nullable=True)
    status = Column(Text, nullable=False, default="active")  # active, draft, sold, rented
    views = Column(Integer, nullable=False, default=0)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=False), nullable=False)
    updated_at = Column(DateTime(timezone=False), nullable=False)


class PropertyFeatures(Base):
    __tablename__ = "property_features"
    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, unique=True)
    has_pool = Column(Boolean, nullable=False, default=False)
    has_garden = Column(Boolean, nullable=False, default=False)
    has_garage = Column(Boolean, nullable=False, default=False)
    has_balcony = Column(Boolean, nullable=False, default=False)
    has_air_conditioning = Column(Boolean, nullable=False, default=False)
    has_gym = Column(Boolean, nullable=False, default=False)
    has_security_system = Column(Boolean, nullable=False, default=False)
    has_fireplace = Column(Boolean, nullable=False, default=False)


class PropertyImage(Base):
    __tablename__ = "property_images"
    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(Text, nullable=False)  # external URL or /uploads/<file>
    is_main = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=False), nullable=False)
