from fastapi import HTTPException
from app.core.errors import DomainError, ErrorCode

STATUS_CODES = {
    ErrorCode.EVENT_NOT_FOUND: 404,
    ErrorCode.USER_NOT_FOUND: 404,
    ErrorCode.RSVP_NOT_FOUND: 404,
    ErrorCode.WAITLIST_ENTRY_NOT_FOUND: 404,
    ErrorCode.ALREADY_WAITLISTED: 409,
    ErrorCode.PERSISTENCE_ERROR: 503,
}


def http_error(code: ErrorCode, message: str) -> HTTPException:
    return HTTPException(status_code=STATUS_CODES.get(code, 500), detail=message)


def to_http(error: DomainError) -> HTTPException:
    return http_error(error.code, error.message)
