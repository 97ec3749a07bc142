"""
Codec PEM
Encodage texte <-> binaire des clés, CSR et certificats, et chargement
des objets cryptography correspondants
"""

import logging
import re
from enum import Enum
from typing import List, Optional, Tuple, Union

from asn1crypto import core
from asn1crypto import pem as asn1_pem
from cryptography import exceptions as crypto_exceptions
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from .exceptions import PemParseError

logger = logging.getLogger(__name__)

PemInput = Union[str, bytes]

# Exceptions levées par cryptography sur une structure X.509 chargeable mais invalide
# (InvalidVersion, DuplicateExtension... ne dérivent pas de ValueError)
X509_ERRORS = (
    ValueError,
    TypeError,
    crypto_exceptions.UnsupportedAlgorithm,
    x509.InvalidVersion,
    x509.DuplicateExtension,
    x509.UnsupportedGeneralNameType,
)

# Libellés BEGIN/END (asn1crypto ne vérifie pas leur cohérence)
_BEGIN_LABEL = re.compile(r"-----BEGIN ([A-Z0-9 ]+)-----")
_END_LABEL = re.compile(r"-----END ([A-Z0-9 ]+)-----")


class PemKind(str, Enum):
    """Type d'artefact, identifié par le libellé BEGIN/END"""
    PRIVATE_KEY = "PRIVATE KEY"
    PUBLIC_KEY = "PUBLIC KEY"
    CERTIFICATE_REQUEST = "CERTIFICATE REQUEST"
    CERTIFICATE = "CERTIFICATE"
    # Libellés hérités, acceptés en lecture
    ENCRYPTED_PRIVATE_KEY = "ENCRYPTED PRIVATE KEY"
    RSA_PRIVATE_KEY = "RSA PRIVATE KEY"
    EC_PRIVATE_KEY = "EC PRIVATE KEY"
    NEW_CERTIFICATE_REQUEST = "NEW CERTIFICATE REQUEST"

    @property
    def label(self) -> str:
        return self.value


# ============================================
# 🧾 ENCODAGE / DÉCODAGE
# ============================================

def encode(kind: PemKind, der: bytes) -> str:
    """
    Encode des octets DER en bloc PEM

    Args:
        kind: Type d'artefact (détermine le libellé BEGIN/END)
        der: Octets DER

    Returns:
        str: Bloc PEM, lignes de 64 caractères, terminé par un saut de ligne
    """
    kind = PemKind(kind)
    if not der:
        raise PemParseError("Impossible d'encoder un contenu DER vide")
    return asn1_pem.armor(kind.label, bytes(der)).decode("ascii")


def decode(text: PemInput) -> Tuple[PemKind, bytes]:
    """
    Décode le premier bloc PEM d'un texte

    Args:
        text: Texte PEM (str ou bytes)

    Returns:
        tuple: (type, octets DER)

    Raises:
        PemParseError: Bloc absent, tronqué, libellé inconnu ou base64 invalide
    """
    raw = _as_pem_bytes(text)
    try:
        label, _, der = asn1_pem.unarmor(raw)
    except ValueError as e:
        raise PemParseError(f"Aucun bloc PEM complet trouvé: {e}") from e

    end_labels = _END_LABEL.findall(raw.decode("ascii"))
    return _check_block(label, end_labels[0] if end_labels else None, der)


def decode_all(text: PemInput) -> List[Tuple[PemKind, bytes]]:
    """
    Décode tous les blocs PEM concaténés d'un texte (ex: bundle de CA)

    Raises:
        PemParseError: Si aucun bloc n'est trouvé ou si l'un d'eux est invalide
    """
    raw = _as_pem_bytes(text)
    try:
        blocks = list(asn1_pem.unarmor(raw, multiple=True))
    except ValueError as e:
        raise PemParseError(f"Aucun bloc PEM complet trouvé: {e}") from e

    ascii_text = raw.decode("ascii")
    end_labels = _END_LABEL.findall(ascii_text)
    if not len(blocks) == len(end_labels) == len(_BEGIN_LABEL.findall(ascii_text)):
        raise PemParseError("Lignes BEGIN/END déséquilibrées dans le texte PEM")
    logger.debug("%d bloc(s) PEM trouvé(s)", len(blocks))
    return [
        _check_block(label, end_label, der)
        for (label, _, der), end_label in zip(blocks, end_labels)
    ]


def _as_pem_bytes(text: PemInput) -> bytes:
    if isinstance(text, str):
        text = text.encode("utf-8")
    if not isinstance(text, (bytes, bytearray)):
        raise PemParseError(f"Entrée PEM invalide: {type(text).__name__}")
    try:
        bytes(text).decode("ascii")
    except UnicodeDecodeError:
        raise PemParseError("Le texte PEM contient des caractères non ASCII") from None
    return bytes(text)


def _check_block(begin: str, end: Optional[str], der: bytes) -> Tuple[PemKind, bytes]:
    if begin != end:
        raise PemParseError(f"Libellés PEM incohérents: BEGIN {begin} / END {end}")

    try:
        kind = PemKind(begin)
    except ValueError:
        raise PemParseError(f"Type PEM non supporté: {begin}") from None

    if not der:
        raise PemParseError(f"Bloc PEM {begin} vide ou base64 invalide")

    # Une SEQUENCE DER couvrant exactement les octets (tronqué ou excédent refusés)
    try:
        envelope = core.load(der, strict=True)
    except ValueError as e:
        raise PemParseError(f"Bloc {begin} tronqué ou corrompu: {e}") from e
    if not isinstance(envelope, core.Sequence):
        raise PemParseError(f"Le bloc {begin} ne contient pas une SEQUENCE DER")

    return kind, der


# ============================================
# 📂 CHARGEMENT DES OBJETS
# ============================================

def _as_bytes(data: PemInput) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    raise PemParseError(f"Entrée invalide: {type(data).__name__}")


def _is_pem(data: bytes) -> bool:
    return b"-----BEGIN " in data


def load_private_key(data: PemInput, password: Union[str, bytes, None] = None):
    """
    Charge une clé privée PEM (PKCS#8, PKCS#1, SEC1, chiffrée ou non) ou DER

    Args:
        data: Clé privée
        password: Mot de passe si la clé est chiffrée (str ou bytes)

    Raises:
        PemParseError: Clé illisible, mot de passe manquant ou incorrect
    """
    raw = _as_bytes(data)
    if isinstance(password, str):
        password = password.encode("utf-8")
    password_bytes = password or None

    try:
        if _is_pem(raw):
            return serialization.load_pem_private_key(raw, password=password_bytes)
        return serialization.load_der_private_key(raw, password=password_bytes)
    except (ValueError, TypeError, crypto_exceptions.UnsupportedAlgorithm) as e:
        error_msg = str(e).lower()
        if "password" in error_msg or "decrypt" in error_msg:
            raise PemParseError("Mot de passe incorrect ou clé corrompue") from e
        raise PemParseError(f"Clé privée illisible: {e}") from e


def load_certificate(data: PemInput) -> x509.Certificate:
    """
    Charge un certificat X.509 (PEM ou DER)

    Raises:
        PemParseError: Structure invalide
    """
    raw = _as_bytes(data)
    try:
        if _is_pem(raw):
            cert = x509.load_pem_x509_certificate(raw)
        else:
            cert = x509.load_der_x509_certificate(raw)
        cert.extensions  # force l'analyse des extensions
        return cert
    except X509_ERRORS as e:
        raise PemParseError(f"Certificat illisible: {e}") from e


def load_certificates(data: PemInput) -> List[x509.Certificate]:
    """Charge tous les certificats d'un bundle PEM"""
    raw = _as_bytes(data)
    try:
        certs = x509.load_pem_x509_certificates(raw)
        for cert in certs:
            cert.extensions
        return certs
    except X509_ERRORS as e:
        raise PemParseError(f"Bundle de certificats illisible: {e}") from e


def load_csr(data: PemInput) -> x509.CertificateSigningRequest:
    """
    Charge une demande de certificat PKCS#10 (PEM ou DER)

    Raises:
        PemParseError: Structure invalide
    """
    raw = _as_bytes(data)
    try:
        if _is_pem(raw):
            csr = x509.load_pem_x509_csr(raw)
        else:
            csr = x509.load_der_x509_csr(raw)
        csr.extensions  # force l'analyse des extensions
        return csr
    except X509_ERRORS as e:
        raise PemParseError(f"CSR illisible: {e}") from e


def public_key_der(public_key) -> bytes:
    """Encodage canonique SubjectPublicKeyInfo DER d'une clé publique"""
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )


__all__ = [
    'PemKind',
    'PemInput',
    'X509_ERRORS',
    'encode',
    'decode',
    'decode_all',
    'load_private_key',
    'load_certificate',
    'load_certificates',
    'load_csr',
    'public_key_der'
]
