from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from menu_builder.core.database import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    logo_url = Column(String, nullable=True)
    # One company per owner
    owner_id = Column(Integer, ForeignKey("users.id"), unique=True, index=True, nullable=False)
    menu_link = Column(String, unique=True, nullable=False)
    qr_code_url = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    menu_items = relationship("MenuItem", back_populates="company", passive_deletes=True)
