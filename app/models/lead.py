# ===== app/models/lead.py =====
# Read model over the lead management table. Only the columns the
# scheduling service reads (or claims) are mapped.
from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from app.models.base import Base
import uuid


class Lead(Base):
    __tablename__ = "leads"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    assigned_agent_id = Column(UUID(as_uuid=True), nullable=True)

    consumer_first_name = Column(String(100), nullable=False, default="")
    consumer_last_name = Column(String(100), nullable=False, default="")
    consumer_phone = Column(String(30), nullable=False, default="")
    consumer_email = Column(String(255), nullable=True)

    address_street = Column(String(200), nullable=False, default="")
    address_house_number = Column(String(20), nullable=False, default="")
    address_city = Column(String(100), nullable=False, default="")

    @property
    def address(self) -> str:
        return f"{self.address_street} {self.address_house_number}, {self.address_city}"
