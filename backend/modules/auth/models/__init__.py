from .user_models import User, UserRole, RefreshToken

__all__ = ["User", "UserRole", "RefreshToken"]
