from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.db import Base
from app.models.base import PrincipalMixin


class Admin(PrincipalMixin, Base):
    __tablename__ = "admins"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
