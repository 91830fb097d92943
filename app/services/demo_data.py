from structlog import get_logger

from app.schemas.inquiry import InquiryCreate
from app.schemas.property import PropertyCreate, PropertyFeaturesUpdate, PropertyImageCreate
from app.schemas.user import UserCreate
from app.storage import Storage

logger = get_logger()

DEMO_USERNAME = "demo"

# (listing, feature names, main image)
DEMO_LISTINGS = [
    (
        dict(
            title="Modern Family Home",
            description="Beautiful modern family home in a quiet neighborhood with access to great schools and amenities.",
            price="425000", address="123 Main St", city="Austin", state="TX", zip_code="78701",
            property_type="House", listing_type="For Sale", bedrooms=3, bathrooms="2",
            square_feet=1850, year_built=2018, status="active",
        ),
        ["Pool", "Garden", "Garage", "Air Conditioning", "Security System", "Fireplace"],
        "https://images.unsplash.com/photo-1600585154340-be6161a56a0c?auto=format&fit=crop&w=800&q=80",
    ),
    (
        dict(
            title="Luxury Apartment",
            description="High-end luxury apartment in the heart of the city with stunning views and premium amenities.",
            price="2850", address="456 Park Ave", city="New York", state="NY", zip_code="10022",
            property_type="Apartment", listing_type="For Rent", bedrooms=2, bathrooms="2",
            square_feet=1100, year_built=2015, status="active",
        ),
        ["Garage", "Balcony", "Air Conditioning", "Gym", "Security System"],
        "https://images.unsplash.com/photo-1512917774080-9991f1c4c750?auto=format&fit=crop&w=800&q=80",
    ),
    (
        dict(
            title="Contemporary Townhouse",
            description="Stylish and modern townhouse with high-end finishes and a great location close to entertainment and dining.",
            price="575000", address="789 Oak Dr", city="Chicago", state="IL", zip_code="60611",
            property_type="Townhouse", listing_type="For Sale", bedrooms=4, bathrooms="3",
            square_feet=2200, year_built=2019, status="active",
        ),
        ["Garden", "Garage", "Balcony", "Air Conditioning", "Security System", "Fireplace"],
        "https://images.unsplash.com/photo-1605276374104-dee2a0ed3cd6?auto=format&fit=crop&w=800&q=80",
    ),
    (
        dict(
            title="Oceanfront Cottage",
            description="Charming beachfront cottage with direct ocean access and stunning panoramic views.",
            price="3900", address="101 Beach Rd", city="Miami", state="FL", zip_code="33139",
            property_type="House", listing_type="For Rent", bedrooms=3, bathrooms="2",
            square_feet=1650, year_built=2010, status="active",
        ),
        ["Pool", "Garden", "Balcony", "Air Conditioning", "Security System"],
        "https://images.unsplash.com/photo-1584738766473-61c083514bf4?auto=format&fit=crop&w=800&q=80",
    ),
    (
        dict(
            title="City Apartment",
            description="Urban apartment in a prime downtown location with easy access to public transit.",
            price="450000", address="555 Downtown Ave", city="Seattle", state="WA", zip_code="98101",
            property_type="Apartment", listing_type="For Sale", bedrooms=2, bathrooms="2",
            square_feet=950, year_built=2017, status="draft",
        ),
        None,
        None,
    ),
]

# (index into DEMO_LISTINGS, inquiry fields)
DEMO_INQUIRIES = [
    (0, dict(name="John Smith", email="john@example.com", phone="555-123-4567",
             message="I'm interested in viewing this property. When would be a good time to schedule a showing?")),
    (0, dict(name="Sarah Johnson", email="sarah@example.com", phone="555-987-6543",
             message="Does this property have a finished basement? Also, how old is the roof?")),
    (2, dict(name="Michael Brown", email="michael@example.com", phone="555-456-7890",
             message="I'm looking for a home in this area and would like to know if this property is still available.")),
]


async def seed_demo_data(storage: Storage) -> None:
    """Create the demo seller and sample listings unless listings already exist."""
    user = await storage.get_user_by_username(DEMO_USERNAME)
    if user is None:
        user = await storage.create_user(UserCreate(username=DEMO_USERNAME, password="demo123"))

    if await storage.get_properties():
        logger.info("Demo data skipped; listings already present")
        return

    created = []
    for listing, features, image_url in DEMO_LISTINGS:
        prop = await storage.create_property(
            PropertyCreate(**listing, seller_id=user.id),
            PropertyFeaturesUpdate.from_names(features) if features is not None else None,
        )
        if image_url is not None:
            await storage.add_property_image(PropertyImageCreate(property_id=prop.id, image_url=image_url, is_main=True))
        created.append(prop)

    for index, inquiry in DEMO_INQUIRIES:
        await storage.create_inquiry(InquiryCreate(property_id=created[index].id, **inquiry))

    logger.info("Demo data created", seller_id=user.id, properties=len(created), inquiries=len(DEMO_INQUIRIES))
