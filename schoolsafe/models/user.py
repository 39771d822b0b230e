
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from datetime import datetime
from schoolsafe.db.session import Base

ROLES = ("director", "teacher", "student", "parent")

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(15))
    role = Column(String(20), nullable=False)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    grade = Column(String(50))
    # parents are linked to exactly one student
    student_id = Column(Integer, ForeignKey("users.id"), index=True)
    school = Column(String(200), default="")
    is_active = Column(Boolean, nullable=False, default=True)
    last_active = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (Index("ix_users_tenant_role", "tenant_id", "role"),)