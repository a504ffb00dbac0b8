"""
Request signature scheme shared with partners.

Signing string: compact UTC timestamp (yyyyMMddHHmmss) + the values of
SIGNED_FIELDS concatenated in order + the partner password as sent (Base64 text).
Signature: Base64 of the lowercase hex SHA-256 digest of the signing string.
The hex step is part of the wire format, partners sign the same way.
"""
from datetime import datetime, timedelta, timezone
import base64
import hashlib
import logging
import re

from .models import Partner, PartnerDirectory
from .schemas import TrxRequest

logger = logging.getLogger(__name__)

# yyyy-MM-ddTHH:mm:ss.fffffffZ, exactly seven fractional digits
TIMESTAMP_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{7})Z",
    re.ASCII,
)
SIG_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
_MICROSECOND = timedelta(microseconds=1)

# Request fields covered by the signature, in ordinal order of their wire names.
# sig, timestamp, partnerPassword and items are not part of this list.
SIGNED_FIELDS = ("partnerKey", "partnerRefNo", "totalAmount")

_FIELD_ATTRIBUTES = {
    "partnerKey": "partner_key",
    "partnerRefNo": "partner_ref_no",
    "totalAmount": "total_amount",
}


def parse_timestamp(timestamp: str) -> datetime:
    """Parses the strict request timestamp into an aware UTC datetime. Raises ValueError."""
    match = TIMESTAMP_PATTERN.fullmatch(timestamp or "")
    if match is None:
        raise ValueError(f"Timestamp '{timestamp}' does not match yyyy-MM-ddTHH:mm:ss.fffffffZ")
    year, month, day, hour, minute, second, fraction = match.groups()
    # datetime keeps microseconds; is_expired reads the seventh digit (100ns) itself
    return datetime(
        int(year), int(month), int(day),
        int(hour), int(minute), int(second),
        int(fraction[:6]),
        tzinfo=timezone.utc,
    )


def is_valid_timestamp(timestamp: str) -> bool:
    try:
        parse_timestamp(timestamp)
    except ValueError:
        return False
    return True


def format_timestamp(moment: datetime) -> str:
    """Inverse of parse_timestamp, for partners building requests."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond:06d}0Z"


def compact_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime(SIG_TIMESTAMP_FORMAT)


def request_values(request: TrxRequest) -> str:
    values = []
    for field in SIGNED_FIELDS:
        value = getattr(request, _FIELD_ATTRIBUTES[field])
        values.append(str(value))
    return "".join(values)


def build_signing_string(sig_timestamp: str, values: str, partner_password: str) -> str:
    return sig_timestamp + values + partner_password


def generate_signature(signing_string: str) -> str:
    hex_digest = hashlib.sha256(signing_string.encode("utf-8")).hexdigest()
    return base64.b64encode(hex_digest.encode("utf-8")).decode("ascii")


def sign(partner_key: str, partner_ref_no: str, total_amount: int, timestamp: str, partner_password: str) -> str:
    """Computes the sig a partner must send for the given field values."""
    fields = {"partnerKey": partner_key, "partnerRefNo": partner_ref_no, "totalAmount": total_amount}
    values = "".join(str(fields[field]) for field in SIGNED_FIELDS)
    signing_string = build_signing_string(compact_timestamp(parse_timestamp(timestamp)), values, partner_password)
    return generate_signature(signing_string)


def is_expired(timestamp: str, now: datetime, window: timedelta) -> bool:
    """True when the request time is further than `window` from `now`, in either direction."""
    request_time = parse_timestamp(timestamp)
    # Compare in 100ns ticks so the seventh fractional digit still counts
    hundred_ns = int(TIMESTAMP_PATTERN.fullmatch(timestamp).group(7)[6])
    difference_ticks = (now - request_time) // _MICROSECOND * 10 - hundred_ns
    return abs(difference_ticks) > window // _MICROSECOND * 10


class SignatureVerifier:
    """Checks partner membership, then recomputes and compares the request signature."""

    def __init__(self, directory: PartnerDirectory):
        self.directory = directory

    def is_known_partner(self, request: TrxRequest) -> bool:
        # Password comes in already Base64-encoded, no re-encoding
        candidate = Partner(
            partner_no=request.partner_ref_no,
            partner_key=request.partner_key,
            partner_password=request.partner_password,
        )
        return self.directory.contains(candidate)

    def compute_signature(self, request: TrxRequest) -> str:
        logger.debug("Build Signature string.")
        sig_timestamp = compact_timestamp(parse_timestamp(request.timestamp))
        signing_string = build_signing_string(sig_timestamp, request_values(request), request.partner_password)
        logger.debug("Generate Signature string.")
        return generate_signature(signing_string)

    def is_authorized(self, request: TrxRequest) -> bool:
        if not self.is_known_partner(request):
            logger.debug(f"Unknown partner '{request.partner_ref_no}' / '{request.partner_key}'")
            return False
        return self.compute_signature(request) == request.sig
