# Models package - Import all models for Flask-SQLAlchemy

from models.fuel import FuelRecord
from models.users import User

__all__ = [
    'FuelRecord',
    'User',
]
