"""Some staking-agnostic functions which are used being in staking"""
import functools
from typing import Optional

from django.db import DatabaseError

from termstake.base.api import TermstakeAPIError
from termstake.staking import errors

# Most specific classes first, the first isinstance match wins
API_STATUS_CODES = (
    (errors.AdminAuthenticationFailed, 401),
    (errors.AuthorizationError, 403),
    (errors.ValidationError, 400),
    (errors.ConfigurationError, 400),
    (errors.NotFound, 404),
    (errors.InvalidState, 409),
    (errors.SettlementError, 503),
    (errors.StoreError, 500),
)


def staking_exc_to_api_exc_translator(exception: Exception) -> Optional[Exception]:
    """Convert `staking core` exceptions to API exceptions.

    Every API shares one mapping from the error taxonomy to HTTP statuses,
    settlement failures are reported as retryable (503).
    """
    if not isinstance(exception, errors.StakingError):
        return None
    for error_class, status_code in API_STATUS_CODES:
        if isinstance(exception, error_class):
            return TermstakeAPIError(
                status_code=status_code,
                code=exception.code,
                message=exception.message or exception.code,
            )
    return TermstakeAPIError(status_code=500, code=exception.code, message=exception.message or exception.code)


def translate_staking_errors(view):
    @functools.wraps(view)
    def wrapped(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except Exception as e:
            api_exception = staking_exc_to_api_exc_translator(e)
            if api_exception is None:
                raise
            raise api_exception from e
    return wrapped


def store_errors(func):
    """Surface database failures of a service call as StoreError."""
    @functools.wraps(func)
    def wrapped(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            raise errors.StoreError(f'Ledger store failure: {e}') from e
    return wrapped
