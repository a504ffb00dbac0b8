from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional
import base64
import binascii
import logging
import re

from . import signature
from .models import PartnerDirectory
from .schemas import ItemDetail, TrxRequest

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_WINDOW = timedelta(minutes=5)

_WHITESPACE = re.compile(r"[ \t\r\n]")


class ValidationFailure(Enum):
    """Caller-facing validation failures, in the order they are checked."""
    MALFORMED_PASSWORD = "PartnerPassword must be a valid Base64 encoded string."
    MALFORMED_TIMESTAMP = "Timestamp must be a valid ISO 8601 UTC datetime string (e.g., 2024-08-15T02:11:22.0000000Z)."
    UNAUTHORIZED = "Access Denied!"
    AMOUNT_MISMATCH = "Invalid Total Amount."
    EXPIRED = "Expired."

    @property
    def message(self) -> str:
        return self.value


class AuthorizationError(Exception):
    """Internal fault while evaluating partner or signature. Not a validation failure."""


def is_base64_string(text: str) -> bool:
    if not text or not text.strip():
        return False
    # Embedded whitespace is tolerated, anything else must be strict Base64
    compact = _WHITESPACE.sub("", text)
    # b64decode tolerates surplus '=' after a complete group
    if len(compact) % 4 != 0:
        return False
    try:
        base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def is_valid_total_amount(total_amount: int, items: list[ItemDetail]) -> bool:
    if not items:
        return False
    items_amount = sum(item.qty * item.unit_price for item in items)
    return items_amount == total_amount


class RequestValidator:
    """
    Runs the request checks in a fixed order and returns the first failure.
    """

    def __init__(
        self,
        directory: PartnerDirectory,
        verifier: Optional[signature.SignatureVerifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        expiry_window: timedelta = DEFAULT_EXPIRY_WINDOW,
    ):
        self.verifier = verifier or signature.SignatureVerifier(directory)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.expiry_window = expiry_window

    def validate(self, request: TrxRequest) -> Optional[ValidationFailure]:
        logger.debug(f"Validating request from partner '{request.partner_ref_no}'")

        if not is_base64_string(request.partner_password):
            return ValidationFailure.MALFORMED_PASSWORD

        if not signature.is_valid_timestamp(request.timestamp):
            return ValidationFailure.MALFORMED_TIMESTAMP

        if not self._is_authorized(request):
            return ValidationFailure.UNAUTHORIZED

        logger.debug("Validate Total Amount.")
        if not is_valid_total_amount(request.total_amount, request.items):
            return ValidationFailure.AMOUNT_MISMATCH

        logger.debug("Validate Expiry.")
        if signature.is_expired(request.timestamp, self.clock(), self.expiry_window):
            return ValidationFailure.EXPIRED

        return None

    def _is_authorized(self, request: TrxRequest) -> bool:
        logger.debug("Validate authorization.")
        try:
            return self.verifier.is_authorized(request)
        except Exception as e:
            raise AuthorizationError(f"Authorization could not be evaluated: {e}") from e
