from fastapi import HTTPException
from ..services.errors import ErrorKind, Result

STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AUCTION_CLOSED: 400,
    ErrorKind.BID_TOO_LOW: 400,
    ErrorKind.INVALID_TRANSITION: 400,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.CONCURRENT_MODIFICATION: 409,
    ErrorKind.CONFLICT: 409,
}


def unwrap(result: Result):
    """Return the result value or raise the matching HTTPException."""
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=STATUS_CODES.get(result.error, 400),
        detail={"code": result.error.value, "message": result.message},
    )
