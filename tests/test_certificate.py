"""Tests du décodage de certificats"""

import hashlib

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from certkit.certificate import CertificateDecoder
from certkit.exceptions import PemParseError
from certkit.models import SanEntry, SanKind


@pytest.fixture
def decoder():
    return CertificateDecoder()


def _colon_hex(data: bytes) -> str:
    return ":".join(f"{b:02X}" for b in data)


def test_decode_fields(decoder, rsa_key, rsa_cert, cert_pem):
    cert = decoder.load(cert_pem(rsa_cert))

    assert cert.subject.common_name == "test.example.com"
    assert cert.subject.to_string() == "CN=test.example.com, C=FR, O=Test Org"
    assert cert.is_self_issued
    assert cert.serial_number == f"{rsa_cert.serial_number:X}"
    assert cert.sans == (
        SanEntry(SanKind.DNS, "test.example.com"),
        SanEntry(SanKind.IP, "192.168.1.10"),
    )
    assert cert.public_key_algorithm == "RSA"
    assert cert.public_key_size == 2048
    assert cert.signature_algorithm == "SHA256withRSA"
    assert cert.version == 3
    assert cert.validity.not_before == rsa_cert.not_valid_before_utc
    assert cert.validity.not_after == rsa_cert.not_valid_after_utc
    assert cert.validity.is_current()
    assert 363 <= cert.validity.days_remaining() <= 365


def test_fingerprints(decoder, rsa_key, rsa_cert, cert_pem):
    cert = decoder.load(cert_pem(rsa_cert))

    spki = rsa_key.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    assert cert.fingerprint == _colon_hex(hashlib.sha256(spki).digest())
    assert cert.certificate_fingerprint == _colon_hex(
        hashlib.sha256(rsa_cert.public_bytes(serialization.Encoding.DER)).digest()
    )
    assert len(cert.fingerprint.split(":")) == 32


def test_same_key_same_fingerprint(decoder, rsa_key, cert_factory, cert_pem):
    first = decoder.load(cert_pem(cert_factory(rsa_key, common_name="one.example.com")))
    second = decoder.load(cert_pem(cert_factory(rsa_key, common_name="two.example.com")))
    assert first.fingerprint == second.fingerprint
    assert first.certificate_fingerprint != second.certificate_fingerprint


def test_issued_certificate(decoder, rsa_key, ec_key, cert_factory, cert_pem):
    cert = decoder.load(cert_pem(cert_factory(ec_key, issuer_key=rsa_key, issuer_cn="Issuing CA")))

    assert not cert.is_self_issued
    assert cert.issuer.common_name == "Issuing CA"
    assert cert.public_key_algorithm == "EC secp256r1"
    assert cert.public_key_size == 256
    assert cert.signature_algorithm == "SHA256withRSA"
    assert cert.sans == ()


def test_decode_der(decoder, rsa_cert):
    cert = decoder.load(rsa_cert.public_bytes(serialization.Encoding.DER))
    assert cert.subject.common_name == "test.example.com"


def test_to_dict(decoder, rsa_cert, cert_pem):
    data = decoder.load(cert_pem(rsa_cert)).to_dict()
    assert data["sans"] == ["DNS:test.example.com", "IP:192.168.1.10"]
    assert data["subject"][0] == {"short": "CN", "name": "commonName", "value": "test.example.com"}
    assert set(data["validity"]) == {"from", "to"}
    assert data["publicKey"] == {"algorithm": "RSA", "size": 2048}


@pytest.mark.parametrize("data", [
    "garbage",
    b"\x00\x01\x02",
    "-----BEGIN CERTIFICATE-----\nMAMCAQU=\n-----END CERTIFICATE-----\n",
])
def test_malformed_input(decoder, data):
    assert decoder.decode(data) is None
    with pytest.raises(PemParseError):
        decoder.load(data)


def test_loadable_but_invalid_certificate(decoder, loadable_invalid_cert_pem):
    """Version hors norme ou extension dupliquée: None / PemParseError"""
    assert decoder.decode(loadable_invalid_cert_pem) is None
    with pytest.raises(PemParseError):
        decoder.load(loadable_invalid_cert_pem)


def test_from_x509_duplicate_extension(decoder, duplicate_extension_cert_pem):
    """Extension dupliquée sur un certificat déjà chargé par cryptography"""
    cert = x509.load_pem_x509_certificate(duplicate_extension_cert_pem.encode())
    with pytest.raises(PemParseError):
        decoder.from_x509(cert)
