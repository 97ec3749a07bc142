"""
Demandes de certificat PKCS#10
Assemblage déterministe de la structure à signer, signature et décodage
"""

import dataclasses
import logging
from typing import Iterable, Optional, Union

from asn1crypto import algos, core
from asn1crypto import csr as asn1_csr
from asn1crypto import keys as asn1_keys
from asn1crypto import x509 as asn1_x509
from cryptography import exceptions as crypto_exceptions
from cryptography.hazmat.primitives.asymmetric import rsa, ec, padding

from . import naming, pem, utils
from .exceptions import CertKitError, PemParseError, SignatureError
from .extensions import ExtensionBuilder, san_from_extensions
from .models import (
    CertificationRequest,
    DecodedCsr,
    DistinguishedName,
    KeyAlgorithm,
    PrivateKeyTypes,
    SanEntry,
    SignatureAlgorithm,
)

logger = logging.getLogger(__name__)

# (famille de clé, hachage) -> nom asn1crypto de l'AlgorithmIdentifier
_SIGNATURE_ALGORITHM_IDS = {
    (KeyAlgorithm.RSA, SignatureAlgorithm.SHA256): 'sha256_rsa',
    (KeyAlgorithm.RSA, SignatureAlgorithm.SHA384): 'sha384_rsa',
    (KeyAlgorithm.RSA, SignatureAlgorithm.SHA512): 'sha512_rsa',
    (KeyAlgorithm.EC, SignatureAlgorithm.SHA256): 'sha256_ecdsa',
    (KeyAlgorithm.EC, SignatureAlgorithm.SHA384): 'sha384_ecdsa',
    (KeyAlgorithm.EC, SignatureAlgorithm.SHA512): 'sha512_ecdsa',
}


# ============================================
# 🧱 ASSEMBLAGE
# ============================================

class CsrBuilder:
    """
    Compose le CertificationRequestInfo (octets "à signer")

    Des entrées identiques produisent toujours des octets identiques.
    """

    def __init__(self, extension_builder: Optional[ExtensionBuilder] = None):
        self.extension_builder = extension_builder or ExtensionBuilder()

    def assemble(
            self,
            public_key,
            subject: DistinguishedName,
            extensions: Iterable[SanEntry] = (),
            signature_algorithm: Union[str, SignatureAlgorithm] = SignatureAlgorithm.SHA256
    ) -> CertificationRequest:
        """
        Construit une demande non signée

        Args:
            public_key: Clé publique cryptography, ou son encodage SubjectPublicKeyInfo DER
            subject: Sujet ordonné
            extensions: Entrées SAN (liste vide = pas de demande d'extension)
            signature_algorithm: Hachage prévu pour la signature

        Returns:
            CertificationRequest: Demande non signée (signature absente)
        """
        spki_der = public_key if isinstance(public_key, (bytes, bytearray)) else pem.public_key_der(public_key)
        spki_der = bytes(spki_der)
        extensions = tuple(extensions)

        try:
            subject_pk_info = asn1_keys.PublicKeyInfo.load(spki_der)
            subject_pk_info.native  # force l'analyse complète
        except (ValueError, TypeError) as e:
            raise PemParseError(f"Clé publique DER invalide: {e}") from e

        info = asn1_csr.CertificationRequestInfo({
            'version': 'v1',
            'subject': asn1_x509.Name.load(naming.to_x509_name(subject).public_bytes()),
            'subject_pk_info': subject_pk_info,
            'attributes': self._attributes(extensions),
        })

        return CertificationRequest(
            public_key_der=spki_der,
            subject=subject,
            extensions=extensions,
            signature_algorithm=SignatureAlgorithm.parse(signature_algorithm),
            tbs_bytes=info.dump()
        )

    def _attributes(self, extensions) -> asn1_csr.CRIAttributes:
        asn1_extensions = self.extension_builder.to_asn1_extensions(extensions)
        if asn1_extensions is None:
            return asn1_csr.CRIAttributes([])

        return asn1_csr.CRIAttributes([
            asn1_csr.CRIAttribute({
                'type': 'extension_request',
                'values': [asn1_extensions],
            })
        ])


# ============================================
# ✍️ SIGNATURE
# ============================================

class Signer:
    """
    Signe une demande assemblée par CsrBuilder
    """

    def sign(
            self,
            unsigned: CertificationRequest,
            private_key: PrivateKeyTypes,
            digest: Union[str, SignatureAlgorithm, None] = None
    ) -> CertificationRequest:
        """
        Calcule la signature sur exactement les octets "à signer" et l'attache

        Args:
            unsigned: Demande non signée
            private_key: Clé privée correspondant à la clé publique de la demande
            digest: SHA256, SHA384 ou SHA512 (défaut: celui de la demande)

        Returns:
            CertificationRequest: Nouvelle demande signée (DER complet dans `der`)

        Raises:
            SignatureError: Demande déjà signée, hachage inconnu, type de clé non
                supporté ou clé privée ne correspondant pas à la demande
        """
        if unsigned.is_signed:
            raise SignatureError("La demande est déjà signée")

        try:
            algorithm = SignatureAlgorithm.parse(digest or unsigned.signature_algorithm)
        except CertKitError as e:
            raise SignatureError(str(e)) from e

        if isinstance(private_key, rsa.RSAPrivateKey):
            key_algorithm = KeyAlgorithm.RSA
        elif isinstance(private_key, ec.EllipticCurvePrivateKey):
            key_algorithm = KeyAlgorithm.EC
        else:
            raise SignatureError(f"Type de clé non supporté pour signer: {type(private_key).__name__}")

        if pem.public_key_der(private_key.public_key()) != unsigned.public_key_der:
            raise SignatureError("La clé privée ne correspond pas à la clé publique de la demande")

        hash_algorithm = algorithm.hash_algorithm()
        try:
            if key_algorithm is KeyAlgorithm.RSA:
                signature = private_key.sign(unsigned.tbs_bytes, padding.PKCS1v15(), hash_algorithm)
            else:
                signature = private_key.sign(unsigned.tbs_bytes, ec.ECDSA(hash_algorithm))
        except (ValueError, crypto_exceptions.UnsupportedAlgorithm) as e:
            raise SignatureError(f"Échec de la signature: {e}") from e

        request = asn1_csr.CertificationRequest({
            'certification_request_info': asn1_csr.CertificationRequestInfo.load(unsigned.tbs_bytes),
            'signature_algorithm': self._algorithm_identifier(key_algorithm, algorithm),
            'signature': signature,
        })

        logger.info("CSR signé (%s, %s)", key_algorithm.value, algorithm.value)
        return dataclasses.replace(
            unsigned,
            signature_algorithm=algorithm,
            signature=signature,
            der=request.dump()
        )

    def _algorithm_identifier(self, key_algorithm: KeyAlgorithm,
                              algorithm: SignatureAlgorithm) -> algos.SignedDigestAlgorithm:
        name = _SIGNATURE_ALGORITHM_IDS[(key_algorithm, algorithm)]
        if key_algorithm is KeyAlgorithm.RSA:
            # RFC 4055: paramètres NULL pour sha*WithRSAEncryption
            return algos.SignedDigestAlgorithm({'algorithm': name, 'parameters': core.Null()})
        return algos.SignedDigestAlgorithm({'algorithm': name})


def to_pem(request: CertificationRequest) -> str:
    """Rend une demande signée en PEM"""
    if not request.is_signed:
        raise SignatureError("Une demande non signée ne peut pas être exportée")
    return pem.encode(pem.PemKind.CERTIFICATE_REQUEST, request.der)


# ============================================
# 🔍 DÉCODAGE
# ============================================

class CsrDecoder:
    """
    Décode un CSR existant en structure lisible
    """

    def decode(self, data: pem.PemInput) -> Optional[DecodedCsr]:
        """Décode un CSR; None si l'entrée est inutilisable"""
        try:
            return self.load(data)
        except CertKitError as e:
            logger.debug("Décodage CSR impossible: %s", e)
            return None

    def load(self, data: pem.PemInput) -> DecodedCsr:
        """
        Décode un CSR

        Raises:
            PemParseError: Entrée illisible
        """
        csr = pem.load_csr(data)

        try:
            public_key = csr.public_key()
            algorithm, size = utils.describe_public_key(public_key)
            return DecodedCsr(
                subject=naming.from_x509_name(csr.subject),
                sans=san_from_extensions(csr.extensions),
                public_key_algorithm=algorithm,
                public_key_size=size,
                signature_algorithm=utils.describe_signature(csr.signature_algorithm_oid),
                signature_valid=csr.is_signature_valid
            )
        except pem.X509_ERRORS as e:
            raise PemParseError(f"CSR illisible: {e}") from e


# Instances par défaut
csr_builder = CsrBuilder()
signer = Signer()
csr_decoder = CsrDecoder()

__all__ = [
    'CsrBuilder',
    'Signer',
    'CsrDecoder',
    'csr_builder',
    'signer',
    'csr_decoder',
    'to_pem'
]
