"""Noms des rôles connus du système et regroupements utilisés par les vues."""

SUPER_ADMIN = "Super Admin"
ADMINISTRATOR = "Administrator"
MANAGER = "Manager"
USER = "User"
GUEST = "Guest"

ADMINS = (SUPER_ADMIN, ADMINISTRATOR)
STAFF = ADMINS + (MANAGER,)
MEMBERS = STAFF + (USER,)

# Catalogue de permissions (nom, description) créé par `seed_defaults`
PERMISSION_CATALOG = [
    ("user:create", "Create new users"),
    ("user:read", "View user information"),
    ("user:update", "Update user information"),
    ("user:delete", "Delete users"),
    ("user:list", "List all users"),
    ("user:activate", "Activate/deactivate users"),
    ("user:assign-role", "Assign roles to users"),
    ("user:assign-office", "Assign offices to users"),
    ("role:create", "Create new roles"),
    ("role:read", "View role information"),
    ("role:update", "Update role information"),
    ("role:delete", "Delete roles"),
    ("role:list", "List all roles"),
    ("role:assign-permissions", "Assign permissions to roles"),
    ("permission:read", "View permission information"),
    ("permission:list", "List all permissions"),
    ("menu:create", "Create new menu items"),
    ("menu:read", "View menu information"),
    ("menu:update", "Update menu information"),
    ("menu:delete", "Delete menu items"),
    ("menu:list", "List all menu items"),
    ("menu:assign-roles", "Assign roles to menu items"),
    ("office:create", "Create new offices"),
    ("office:read", "View office information"),
    ("office:update", "Update office information"),
    ("office:delete", "Delete offices"),
    ("office:list", "List all offices"),
    ("office:assign-users", "Assign users to offices"),
    ("notification:create", "Create notifications"),
    ("notification:read", "View notifications"),
    ("notification:update", "Update notifications"),
    ("notification:delete", "Delete notifications"),
    ("notification:mark-read", "Mark a notification as read"),
    ("notification:mark-all-read", "Mark all notifications as read"),
    ("notification:unread-count", "Count unread notifications"),
    ("notification:types", "List notification types"),
    ("auth:login", "Login to the system"),
    ("auth:logout", "Logout from the system"),
    ("auth:refresh-token", "Refresh authentication token"),
    ("auth:change-password", "Change user password"),
    ("system:settings", "Manage system settings"),
    ("system:logs", "View system logs"),
]

_USER_PERMISSIONS = {
    "auth:login",
    "auth:logout",
    "auth:change-password",
    "user:read",
    "notification:read",
    "notification:mark-read",
    "notification:mark-all-read",
    "notification:unread-count",
    "notification:types",
}


def permissions_for_role(role_name: str, names):
    """Sous-ensemble du catalogue attribué à un rôle par défaut."""
    if role_name == SUPER_ADMIN:
        return list(names)
    if role_name == ADMINISTRATOR:
        return [n for n in names if not n.startswith("system:")]
    if role_name == MANAGER:
        prefixes = ("user:", "office:", "auth:", "notification:")
        return [n for n in names if n.startswith(prefixes)]
    if role_name == USER:
        return [n for n in names if n in _USER_PERMISSIONS]
    return [n for n in names if n in ("auth:login", "auth:logout")]


ROLE_DESCRIPTIONS = {
    SUPER_ADMIN: "Has full access to all system features and settings",
    ADMINISTRATOR: "Has access to manage users, roles, and basic system settings",
    MANAGER: "Can manage users and view reports",
    USER: "Basic user with limited access",
    GUEST: "Limited access for external users",
}
