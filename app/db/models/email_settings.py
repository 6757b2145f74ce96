from typing import Optional
from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class EmailSettings(Base):
    __tablename__ = "email_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    send_user_emails: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    send_admin_emails: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # template name -> body with {placeholders}
    templates: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now())
