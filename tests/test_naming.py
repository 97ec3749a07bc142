"""Tests de construction du Distinguished Name"""

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID

from certkit.exceptions import InvalidSubject
from certkit.models import CsrConfig
from certkit.naming import DistinguishedNameBuilder, from_x509_name, to_x509_name


@pytest.fixture
def builder():
    return DistinguishedNameBuilder()


def _full_config(**overrides):
    values = dict(
        common_name="example.com",
        organization="Acme",
        organizational_unit="IT",
        city="Paris",
        state="IDF",
        country="FR",
    )
    values.update(overrides)
    return CsrConfig(**values)


def test_full_subject_order(builder):
    dn = builder.build(_full_config())
    assert [attr.short for attr in dn.attributes] == ["CN", "C", "ST", "L", "O", "OU"]
    assert dn.common_name == "example.com"
    assert dn.get("L") == "Paris"
    assert dn.to_string() == "CN=example.com, C=FR, ST=IDF, L=Paris, O=Acme, OU=IT"


def test_common_name_only(builder):
    dn = builder.build(CsrConfig(common_name="only.example.com"))
    assert len(dn) == 1
    assert dn.to_list() == [{"short": "CN", "name": "commonName", "value": "only.example.com"}]


def test_empty_optional_fields_are_omitted(builder):
    dn = builder.build(_full_config(organizational_unit=None, state="  "))
    assert [attr.short for attr in dn.attributes] == ["CN", "C", "L", "O"]


def test_values_are_stripped_and_country_uppercased(builder):
    dn = builder.build(_full_config(common_name="  example.com ", country="fr"))
    assert dn.common_name == "example.com"
    assert dn.get("C") == "FR"


@pytest.mark.parametrize("overrides", [
    {"common_name": ""},
    {"common_name": "   "},
    {"country": "USA"},
    {"country": "F1"},
    {"common_name": "bad\x00name"},
    {"organization": "line\nbreak"},
    {"common_name": "a" * 65},
    {"organization": 42},
])
def test_invalid_subjects(builder, overrides):
    with pytest.raises(InvalidSubject):
        builder.build(_full_config(**overrides))


def test_invalid_subject_is_a_value_error(builder):
    with pytest.raises(ValueError):
        builder.build(_full_config(common_name=""))


def test_to_x509_name_preserves_order(builder):
    name = to_x509_name(builder.build(_full_config()))
    oids = [attr.oid for attr in name]
    assert oids == [
        NameOID.COMMON_NAME,
        NameOID.COUNTRY_NAME,
        NameOID.STATE_OR_PROVINCE_NAME,
        NameOID.LOCALITY_NAME,
        NameOID.ORGANIZATION_NAME,
        NameOID.ORGANIZATIONAL_UNIT_NAME,
    ]
    assert len(name.rdns) == 6


def test_from_x509_name_inverts_to_x509_name(builder):
    dn = builder.build(_full_config())
    assert from_x509_name(to_x509_name(dn)) == dn


def test_from_x509_name_keeps_unknown_oids():
    name = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, "host"),
        x509.NameAttribute(x509.ObjectIdentifier("1.2.3.4.5"), "custom"),
    ])
    dn = from_x509_name(name)
    assert dn.attributes[1].short == "1.2.3.4.5"
    assert dn.attributes[1].value == "custom"
