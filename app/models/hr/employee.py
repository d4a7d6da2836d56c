from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Employee(BaseModel):
    __tablename__ = 'employees'

    employee_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    job_role = Column(String(100))
    department = Column(String(100), index=True)
    phone = Column(String(20))
    email = Column(String(255))
    # Inline plaintext template from the first revision; only read by the migration to the vault
    fingerprint_template = Column(Text)
    is_active = Column(Boolean, default=True)
    created_by = Column(String(100))

    # Relationships
    fingerprints = relationship("FingerprintTemplate", back_populates="employee")
