from pydantic import BaseModel, ConfigDict
from typing import Iterable
import base64
import logging

logger = logging.getLogger(__name__)


class Partner(BaseModel):
    """A registered partner. The password is always held Base64-encoded."""
    model_config = ConfigDict(frozen=True)

    partner_no: str
    partner_key: str
    partner_password: str # Base64 text, never plaintext

    @classmethod
    def from_plaintext(cls, partner_no: str, partner_key: str, password: str) -> "Partner":
        encoded = base64.b64encode(password.encode("utf-8")).decode("ascii")
        return cls(partner_no=partner_no, partner_key=partner_key, partner_password=encoded)

    def is_equal(self, other: "Partner") -> bool:
        # Exact, case-sensitive match on all three fields
        return (
            self.partner_no == other.partner_no
            and self.partner_key == other.partner_key
            and self.partner_password == other.partner_password
        )

    def __repr__(self):
        return f"<Partner(partner_no='{self.partner_no}', partner_key='{self.partner_key}')>"


class PartnerDirectory:
    """
    Fixed set of known partners. Populated once and never mutated,
    so it can be shared by any number of concurrent validations.
    """

    def __init__(self, partners: Iterable[Partner] = ()):
        self._partners = frozenset(partners)
        logger.debug(f"Partner directory loaded with {len(self._partners)} partner(s)")

    def contains(self, candidate: Partner) -> bool:
        return any(candidate.is_equal(partner) for partner in self._partners)

    def exists(self, partner_ref_no: str, partner_key: str, partner_password_b64: str) -> bool:
        return self.contains(Partner(
            partner_no=partner_ref_no,
            partner_key=partner_key,
            partner_password=partner_password_b64,
        ))

    def __len__(self):
        return len(self._partners)

    def __iter__(self):
        return iter(self._partners)
