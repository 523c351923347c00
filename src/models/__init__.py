from .base import Base
from .permission import PermissionModel, RolePermissionModel
from .role import RoleModel
from .user import UserModel
from .book import BookModel
from .borrow_history import BorrowHistoryModel
from .revoked_token import RevokedTokenModel

__all__ = [
    "Base",
    "PermissionModel",
    "RolePermissionModel",
    "RoleModel",
    "UserModel",
    "BookModel",
    "BorrowHistoryModel",
    "RevokedTokenModel",
]
