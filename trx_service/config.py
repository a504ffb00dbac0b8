import os
from dotenv import load_dotenv

from .models import Partner, PartnerDirectory

load_dotenv() # Optional: Load .env file

APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000")) # Port for this service
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Allowed clock skew between partner and server, either direction
EXPIRY_WINDOW_SECONDS = int(os.getenv("EXPIRY_WINDOW_SECONDS", "300"))

# Comma-separated "partnerNo:partnerKey:plainPassword" triples
DEFAULT_ALLOWED_PARTNERS = "FG-00001:FAKEGOOGLE:FAKEPASSWORD1234,FG-00002:FAKEPEOPLE:FAKEPASSWORD4578"
ALLOWED_PARTNERS = os.getenv("ALLOWED_PARTNERS", DEFAULT_ALLOWED_PARTNERS)


class ConfigurationError(ValueError):
    """Raised at startup when the partner list cannot be parsed."""


def load_partner_directory(raw: str) -> PartnerDirectory:
    """
    Builds the partner directory from the ALLOWED_PARTNERS format.
    Plaintext passwords are Base64-encoded here, the directory only ever sees the encoded form.
    """
    partners = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        # Password is last and may itself contain ':'
        parts = entry.split(":", 2)
        if len(parts) != 3 or not all(parts):
            raise ConfigurationError(f"Invalid partner entry '{entry}', expected partnerNo:partnerKey:password")
        partner_no, partner_key, password = parts
        partners.append(Partner.from_plaintext(partner_no, partner_key, password))
    return PartnerDirectory(partners)
