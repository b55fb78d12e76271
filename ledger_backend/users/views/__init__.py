from .auth import LoginView
from .me import MeView
from .users import UserAdminViewSet

__all__ = ["LoginView", "MeView", "UserAdminViewSet"]
