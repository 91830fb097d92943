from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Text
from app.models import Base

class Inquiry(Base):
    __tablename__ = "inquiries"
    id = Column(Integer, primary_key=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    message = Column(Text, nullable=False)
    is_viewed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=False), nullable=False)
