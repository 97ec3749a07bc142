"""Tests des archives PKCS#12"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from certkit.exceptions import ArchiveError
from certkit.pkcs12 import Pkcs12Packager, order_chain


@pytest.fixture
def packager():
    return Pkcs12Packager()


@pytest.fixture
def chain(rsa_key, other_rsa_key, ec_key, cert_factory):
    """(feuille, intermédiaire, racine)"""
    root = cert_factory(ec_key, common_name="Root CA", ca=True)
    intermediate = cert_factory(other_rsa_key, common_name="Intermediate CA",
                                issuer_key=ec_key, issuer_cn="Root CA", ca=True)
    leaf = cert_factory(rsa_key, common_name="leaf.example.com",
                        issuer_key=other_rsa_key, issuer_cn="Intermediate CA")
    return leaf, intermediate, root


def _der(cert):
    return cert.public_bytes(serialization.Encoding.DER)


def test_package_loads_with_password(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    archive = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw1")
    assert isinstance(archive, bytes)

    key, cert, additional = pkcs12.load_key_and_certificates(archive, b"pw1")
    assert key.private_numbers() == rsa_key.private_numbers()
    assert cert == rsa_cert
    assert additional == []


def test_wrong_password_does_not_open(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    archive = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw1")
    with pytest.raises(ValueError):
        pkcs12.load_key_and_certificates(archive, b"pw2")


def test_different_passwords_give_different_archives(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    first = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw1")
    second = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw2")
    assert first != second


def test_empty_password_is_rejected(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    with pytest.raises(ArchiveError):
        packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "")


def test_mismatched_key_is_rejected(packager, other_rsa_key, rsa_cert, key_pem, cert_pem):
    with pytest.raises(ArchiveError):
        packager.package(key_pem(other_rsa_key), cert_pem(rsa_cert), "pw1")


@pytest.mark.parametrize("bad_key, bad_cert", [(True, False), (False, True)])
def test_unreadable_input(packager, rsa_key, rsa_cert, key_pem, cert_pem, bad_key, bad_cert):
    private_key = "garbage" if bad_key else key_pem(rsa_key)
    certificate = "garbage" if bad_cert else cert_pem(rsa_cert)
    with pytest.raises(ArchiveError):
        packager.package(private_key, certificate, "pw1")


def test_encrypted_private_key(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    encrypted = key_pem(rsa_key, password="keypass")
    archive = packager.package(encrypted, cert_pem(rsa_cert), "pw1", key_password="keypass")
    key, _, _ = pkcs12.load_key_and_certificates(archive, b"pw1")
    assert key.private_numbers() == rsa_key.private_numbers()

    with pytest.raises(ArchiveError):
        packager.package(encrypted, cert_pem(rsa_cert), "pw1")


def test_friendly_name(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    archive = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw1", friendly_name="mon serveur")
    loaded = pkcs12.load_pkcs12(archive, b"pw1")
    assert loaded.cert.friendly_name == "mon serveur".encode("utf-8")


def test_legacy_encryption(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    archive = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), "pw1", legacy=True)
    key, cert, _ = pkcs12.load_key_and_certificates(archive, b"pw1")
    assert cert == rsa_cert
    assert key.private_numbers() == rsa_key.private_numbers()


def test_ca_chain_is_included(packager, rsa_key, chain, key_pem, cert_pem):
    leaf, intermediate, root = chain
    bundle = cert_pem(root) + cert_pem(intermediate)

    archive = packager.package(key_pem(rsa_key), cert_pem(leaf), "pw1", ca_certificates_pem=bundle)
    _, cert, additional = pkcs12.load_key_and_certificates(archive, b"pw1")

    assert cert == leaf
    assert {_der(c) for c in additional} == {_der(intermediate), _der(root)}


def test_ca_chain_as_list(packager, rsa_key, chain, key_pem, cert_pem):
    leaf, intermediate, root = chain
    archive = packager.package(key_pem(rsa_key), cert_pem(leaf), "pw1",
                               ca_certificates_pem=[cert_pem(intermediate), _der(root)])
    _, _, additional = pkcs12.load_key_and_certificates(archive, b"pw1")
    assert len(additional) == 2


def test_order_chain(chain):
    leaf, intermediate, root = chain
    assert order_chain(leaf, [root, intermediate]) == [intermediate, root]
    assert order_chain(leaf, [root, intermediate, leaf]) == [intermediate, root]


def test_order_chain_depth_bound(chain):
    leaf, intermediate, root = chain
    assert order_chain(leaf, [root, intermediate], max_depth=0) == [root, intermediate]
    assert order_chain(leaf, [root, intermediate], max_depth=1) == [intermediate, root]


def test_order_chain_unrelated_certificates_are_kept(chain, rsa_cert):
    leaf, intermediate, root = chain
    assert order_chain(leaf, [rsa_cert, intermediate]) == [intermediate, rsa_cert]


def test_bytes_password_and_friendly_name(packager, rsa_key, rsa_cert, key_pem, cert_pem):
    """Mot de passe et nom convivial fournis en bytes"""
    archive = packager.package(key_pem(rsa_key), cert_pem(rsa_cert), b"pw1", friendly_name=b"server")
    loaded = pkcs12.load_pkcs12(archive, b"pw1")
    assert loaded.cert.certificate == rsa_cert
    assert loaded.cert.friendly_name == b"server"


@pytest.mark.parametrize("password", [123, None, ["pw1"], b""])
def test_invalid_password_type_is_rejected(packager, rsa_key, rsa_cert, key_pem, cert_pem, password):
    """Tout mot de passe hors str/bytes non vide: ArchiveError"""
    with pytest.raises(ArchiveError):
        packager.package(key_pem(rsa_key), cert_pem(rsa_cert), password)


def test_loadable_but_invalid_certificate(packager, rsa_key, key_pem, loadable_invalid_cert_pem):
    with pytest.raises(ArchiveError):
        packager.package(key_pem(rsa_key), loadable_invalid_cert_pem, "pw1")
