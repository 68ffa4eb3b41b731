"""SQLAlchemy ORM models for the security audit trail"""

import uuid
from sqlalchemy import Column, DateTime, Integer, JSON, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class SecurityLayerLog(Base):
    """One row per layer execution of one analyzed transaction"""

    __tablename__ = "security_layer_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_id = Column(Text, nullable=False, index=True)
    user_id = Column(Text, nullable=False, index=True)
    segment_index = Column(Integer, nullable=False, default=0)
    reference = Column(Text, nullable=True)  # provider transaction id, when the SMS had one
    layer_number = Column(Integer, nullable=False)
    layer_name = Column(Text, nullable=False)
    status = Column(Text, nullable=False)
    score = Column(Integer, nullable=False)
    details = Column(JSON, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
