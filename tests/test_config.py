import pytest

from trx_service import config
from trx_service.models import Partner

from conftest import PASSWORD_B64


def test_default_partners_are_loaded_encoded():
    directory = config.load_partner_directory(config.DEFAULT_ALLOWED_PARTNERS)
    assert len(directory) == 2
    assert directory.exists("FG-00001", "FAKEGOOGLE", PASSWORD_B64)
    assert directory.exists("FG-00002", "FAKEPEOPLE", "RkFLRVBBU1NXT1JENDU3OA==")


def test_password_may_contain_separator():
    directory = config.load_partner_directory(" P-1:KEY:pa:ss , ")
    assert list(directory) == [Partner.from_plaintext("P-1", "KEY", "pa:ss")]


@pytest.mark.parametrize("raw", ["P-1:KEY", "P-1::secret", ":KEY:secret"])
def test_malformed_partner_entry(raw):
    with pytest.raises(config.ConfigurationError):
        config.load_partner_directory(raw)


def test_empty_partner_list():
    assert len(config.load_partner_directory("")) == 0


def test_partner_from_plaintext_encodes_password():
    partner = Partner.from_plaintext("FG-00001", "FAKEGOOGLE", "FAKEPASSWORD1234")
    assert partner.partner_password == PASSWORD_B64
    assert partner.is_equal(Partner(partner_no="FG-00001", partner_key="FAKEGOOGLE", partner_password=PASSWORD_B64))
    assert not partner.is_equal(Partner(partner_no="FG-00001", partner_key="fakegoogle", partner_password=PASSWORD_B64))
