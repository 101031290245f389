"""Translation of transport failures into the client's error taxonomy."""

import json
from contextlib import contextmanager
from typing import Any, Iterator

from httpx import DecodingError, RequestError, Response, TimeoutException

from .exceptions import HttpError, NoResponseError, ServerError
from .logging import get_logger

logger = get_logger('normalize')


@contextmanager
def normalize_failures(operation: str) -> Iterator[None]:
    """Re-raise httpx failures inside the block as taxonomy errors.
    
    Errors that already belong to the taxonomy, and anything unrelated to
    the request/response cycle, pass through untouched.
    
    Args:
        operation: Operation name used in error messages
    
    Raises:
        NoResponseError: On timeouts and connection-level failures
        ServerError: When a response arrived but its body could not be decoded
    """
    try:
        yield
    except TimeoutException as e:
        logger.debug(f"{operation} timed out: {e}")
        raise NoResponseError(operation, f"timed out: {e}") from e
    except DecodingError as e:
        raise ServerError(f"{operation} returned an undecodable body: {e}") from e
    except RequestError as e:
        logger.debug(f"{operation} got no response: {type(e).__name__}: {e}")
        raise NoResponseError(operation, str(e) or type(e).__name__) from e


def expect_status(response: Response, status: int, operation: str) -> None:
    """Raise HttpError unless the response carries the expected status."""
    if response.status_code != status:
        raise HttpError(response.status_code, operation, response.text)


def acknowledged(response: Response, status: int, operation: str) -> bool:
    """Check a response to a request that has no body contract.
    
    Args:
        response: Server response
        status: The one status that means success
        operation: Operation name used in error messages
    
    Returns:
        True if the status matches, False for any other non-error status
    
    Raises:
        HttpError: If the server returned an error status (>= 400)
    """
    if response.status_code == status:
        return True
    if response.status_code >= 400:
        raise HttpError(response.status_code, operation, response.text)
    logger.warning(f"{operation} returned unexpected HTTP {response.status_code}")
    return False


def json_body(response: Response, operation: str) -> Any:
    """Decode a JSON body, raising ServerError when it is not JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ServerError(f"{operation} returned a non-JSON body: {e}") from e


def require_field(payload: Any, field: str, kind: type, operation: str) -> Any:
    """Fetch a required field of a JSON object.
    
    Args:
        payload: Decoded JSON body
        field: Field name the contract requires
        kind: Expected Python type of the field
        operation: Operation name used in error messages
    
    Returns:
        The field value
    
    Raises:
        ServerError: If the payload is not an object or the field is missing or mistyped
    """
    if not isinstance(payload, dict) or field not in payload:
        raise ServerError(f"{operation} response is missing '{field}'", payload)
    value = payload[field]
    if not isinstance(value, kind):
        raise ServerError(f"{operation} response field '{field}' is not a {kind.__name__}", payload)
    return value
