from .user import User
from .listing import Listing, Bid, Comment

__all__ = ["User", "Listing", "Bid", "Comment"]
