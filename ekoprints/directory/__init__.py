"""Mini README: Read-only directory records (users and orders).

Users and sales are owned by the external data layer; the back office only
reads them to resolve display names, decide roles and label linked orders.
"""

from .records import Role, Sale, User, find_user, username_for

__all__ = ["Role", "Sale", "User", "find_user", "username_for"]
