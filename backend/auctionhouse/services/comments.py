import logging
from ..models.listing import Listing, Comment
from .errors import ErrorKind, Result
from .store import SqlStore

log = logging.getLogger("uvicorn.error")


def add_comment(store: SqlStore, listing_id: str, author_id: str, content: str) -> Result[Comment]:
    if not store.exists(Listing, listing_id):
        return Result.failure(ErrorKind.NOT_FOUND)
    comment = Comment(listing_id=listing_id, author_id=author_id, content=content)
    store.add(comment)
    log.info("comment added id=%s listing=%s", comment.id, listing_id)
    return Result.success(comment)
