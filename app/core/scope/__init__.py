from app.core.scope.role_scope import RoleScope

__all__ = ["RoleScope"]
