from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db import Base
from app.models.base import PrincipalMixin


class Venture(PrincipalMixin, Base):
    __tablename__ = "ventures"

    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    avatar: Mapped[str] = mapped_column(String(500), nullable=False, default="")
