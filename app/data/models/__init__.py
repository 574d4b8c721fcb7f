#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.user import UserModel
from app.data.models.student import StudentModel
from app.data.models.listing import ListingModel
from app.data.models.order import OrderModel

__all__ = ["UserModel", "StudentModel", "ListingModel", "OrderModel"]
