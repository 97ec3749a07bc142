"""
Fixtures partagées: clés de test et fabrique de certificats
"""

import datetime
import ipaddress

import pytest
from asn1crypto import pem as asn1_pem
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa, ec
from cryptography.x509.oid import NameOID


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


def _key_pem(private_key, password=None) -> str:
    if password:
        encryption = serialization.BestAvailableEncryption(password.encode())
    else:
        encryption = serialization.NoEncryption()
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption
    ).decode()


def _cert_pem(cert: x509.Certificate) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode()


def _name(common_name: str) -> x509.Name:
    return x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        x509.NameAttribute(NameOID.COUNTRY_NAME, "FR"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Org"),
    ])


def _make_certificate(subject_key, common_name="test.example.com", issuer_key=None,
                      issuer_cn=None, sans=None, ca=False, days=365, serial=None):
    """Certificat auto-signé, ou signé par issuer_key si fourni"""
    subject = _name(common_name)
    if issuer_key is None:
        issuer_key = subject_key
        issuer = subject
    else:
        issuer = _name(issuer_cn or "Test CA")

    now = datetime.datetime.now(datetime.timezone.utc)
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(subject_key.public_key())
        .serial_number(serial or x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=days))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
    )

    if sans:
        names = []
        for value in sans:
            try:
                names.append(x509.IPAddress(ipaddress.ip_address(value)))
            except ValueError:
                names.append(x509.DNSName(value))
        builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)

    return builder.sign(issuer_key, hashes.SHA256())


@pytest.fixture
def cert_factory():
    return _make_certificate


@pytest.fixture
def key_pem():
    return _key_pem


@pytest.fixture
def cert_pem():
    return _cert_pem


@pytest.fixture
def rsa_cert(rsa_key):
    return _make_certificate(rsa_key, sans=["test.example.com", "192.168.1.10"])


def _tampered_cert_pem(cert: x509.Certificate, version=None, duplicate_extension=False) -> str:
    """Réencode un certificat chargeable mais invalide (signature non recalculée)"""
    tampered = asn1_x509.Certificate.load(cert.public_bytes(serialization.Encoding.DER))
    tbs = tampered['tbs_certificate']
    if version is not None:
        tbs['version'] = version
    if duplicate_extension:
        extensions = [asn1_x509.Extension.load(ext.dump()) for ext in tbs['extensions']]
        extensions.append(asn1_x509.Extension.load(extensions[0].dump()))
        tbs['extensions'] = asn1_x509.Extensions(extensions)
    return asn1_pem.armor('CERTIFICATE', tampered.dump(force=True)).decode()


@pytest.fixture
def invalid_version_cert_pem(rsa_cert):
    """Certificat dont le champ version vaut 3 (hors v1..v3)"""
    return _tampered_cert_pem(rsa_cert, version=3)


@pytest.fixture
def duplicate_extension_cert_pem(rsa_cert):
    """Certificat portant deux fois la même extension"""
    return _tampered_cert_pem(rsa_cert, duplicate_extension=True)


@pytest.fixture(params=["invalid_version_cert_pem", "duplicate_extension_cert_pem"])
def loadable_invalid_cert_pem(request):
    """Certificats bien formés en DER mais refusés à l'analyse X.509"""
    return request.getfixturevalue(request.param)
