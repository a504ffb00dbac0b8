from datetime import datetime, timezone
import pytest

from trx_service import signature
from trx_service.models import Partner, PartnerDirectory
from trx_service.schemas import TrxRequest
from trx_service.validation import RequestValidator

NOW = datetime(2024, 8, 15, 2, 11, 22, tzinfo=timezone.utc)
TIMESTAMP = "2024-08-15T02:11:22.0000000Z"

PARTNER_NO = "FG-00001"
PARTNER_KEY = "FAKEGOOGLE"
PASSWORD_B64 = "RkFLRVBBU1NXT1JEMTIzNA==" # "FAKEPASSWORD1234"


def build_request(**overrides) -> TrxRequest:
    """A correctly signed request; pass overrides to break individual fields."""
    fields = {
        "partnerKey": PARTNER_KEY,
        "partnerRefNo": PARTNER_NO,
        "partnerPassword": PASSWORD_B64,
        "totalAmount": 1000,
        "items": [
            {"partnerItemRef": "i-00000001", "name": "Pen", "qty": 4, "unitPrice": 200},
            {"partnerItemRef": "i-00000002", "name": "Ruler", "qty": 2, "unitPrice": 100},
        ],
        "timestamp": TIMESTAMP,
    }
    fields.update({k: v for k, v in overrides.items() if k != "sig"})
    fields["sig"] = overrides.get("sig") or signature.sign(
        fields["partnerKey"],
        fields["partnerRefNo"],
        fields["totalAmount"],
        fields["timestamp"] if signature.is_valid_timestamp(fields["timestamp"]) else TIMESTAMP,
        fields["partnerPassword"],
    )
    return TrxRequest.model_validate(fields)


@pytest.fixture
def directory():
    return PartnerDirectory([
        Partner.from_plaintext("FG-00001", "FAKEGOOGLE", "FAKEPASSWORD1234"),
        Partner.from_plaintext("FG-00002", "FAKEPEOPLE", "FAKEPASSWORD4578"),
    ])


@pytest.fixture
def validator(directory):
    return RequestValidator(directory, clock=lambda: NOW)
