"""
Translate service ``Err`` values into HTTP errors.
"""

from typing import NoReturn

from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

from resourcehub.api import schemas
from resourcehub.engine.overallocation import OverAllocationWarning
from resourcehub.engine.result import Err, ErrorKind, Result

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.OVER_ALLOCATION: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def warning_payload(warning: OverAllocationWarning) -> dict:
    return jsonable_encoder(schemas.OverAllocationWarningSchema.model_validate(warning))


def raise_for_err(err: Err) -> NoReturn:
    code = STATUS_BY_KIND.get(err.kind, status.HTTP_400_BAD_REQUEST)
    if isinstance(err.detail, OverAllocationWarning):
        detail = {
            "error": err.kind.value,
            "message": err.detail.message,
            "warning": warning_payload(err.detail),
        }
    else:
        detail = {"error": err.kind.value, "message": str(err.detail)}
    raise HTTPException(status_code=code, detail=detail)


def unwrap_or_raise(result: Result):
    """Return the Ok value or raise the HTTPException for the Err."""
    if isinstance(result, Err):
        raise_for_err(result)
    return result.value
