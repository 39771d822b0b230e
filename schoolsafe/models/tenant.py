
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from datetime import datetime
from schoolsafe.db.session import Base

class Tenant(Base):
    __tablename__ = "tenants"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False)
    address = Column(String(255), nullable=False, default="Address to be updated")
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(15), nullable=False, default="0000000000")
    emergency_contacts = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
