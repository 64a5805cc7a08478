from .user import User
from .competition import Competition
from .swim_record import SwimRecord
from .category import Category
from .document import Document
from .announcement import Announcement

__all__ = [
    "User",
    "Competition",
    "SwimRecord",
    "Category",
    "Document",
    "Announcement",
]
