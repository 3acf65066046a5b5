# app/models/__init__.py
# Import all models here so SQLAlchemy registers them into Base.metadata.

from app.models.user import User  # noqa: F401
from app.models.admin import Admin  # noqa: F401
from app.models.venture import Venture  # noqa: F401

from app.models.coupon import Coupon  # noqa: F401
from app.models.advertisement import Advertisement, AdvertisementView  # noqa: F401
