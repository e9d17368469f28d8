"""
Client Python de l'API Office Nexus: stockage des jetons, intercepteur
(bearer + refresh unique sur 401) et rendu de la barre latérale.
"""
from .api import ApiClient
from .errors import ApiError, Forbidden, SessionExpired
from .sidebar import Sidebar, SidebarNode, SidebarRow
from .store import TokenStore, MemoryTokenStore, FileTokenStore

__all__ = [
    "ApiClient",
    "ApiError",
    "Forbidden",
    "SessionExpired",
    "Sidebar",
    "SidebarNode",
    "SidebarRow",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
]
