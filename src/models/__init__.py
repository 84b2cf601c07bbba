from src.models.admin import Admin
from src.models.contact import Contact
from src.models.favorite import Favorite
from src.models.grade_category import GradeCategoryMapping
from src.models.history import ShipmentHistory, StockHistory
from src.models.listing import Catalog, OutLots, SellingPrice
from src.models.notification import AdminNotification
from src.models.report import Report
from src.models.shipment import Shipment, ShipmentItem
from src.models.stock import Stock, StockAssignment
from src.models.user import User

__all__ = [
    "Admin",
    "AdminNotification",
    "Catalog",
    "Contact",
    "Favorite",
    "GradeCategoryMapping",
    "OutLots",
    "Report",
    "SellingPrice",
    "Shipment",
    "ShipmentHistory",
    "ShipmentItem",
    "Stock",
    "StockAssignment",
    "StockHistory",
    "User",
]
