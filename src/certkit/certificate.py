"""
Décodage des certificats X.509
"""

import logging
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from . import naming, pem, utils
from .exceptions import CertKitError, PemParseError
from .extensions import san_from_extensions
from .models import Certificate, Validity

logger = logging.getLogger(__name__)


class CertificateDecoder:
    """
    Décode un certificat PEM ou DER en vue lisible
    """

    def decode(self, data: pem.PemInput) -> Optional[Certificate]:
        """
        Décode un certificat; None si l'entrée est structurellement invalide

        Ne lève jamais d'exception pour une entrée mal formée.
        """
        try:
            return self.load(data)
        except CertKitError as e:
            logger.debug("Décodage du certificat impossible: %s", e)
            return None

    def load(self, data: pem.PemInput) -> Certificate:
        """
        Décode un certificat

        Raises:
            PemParseError: Entrée illisible
        """
        return self.from_x509(pem.load_certificate(data))

    def from_x509(self, cert: x509.Certificate) -> Certificate:
        """Construit la vue lisible d'un certificat cryptography déjà chargé"""
        try:
            public_key = cert.public_key()
            algorithm, size = utils.describe_public_key(public_key)

            return Certificate(
                subject=naming.from_x509_name(cert.subject),
                issuer=naming.from_x509_name(cert.issuer),
                validity=Validity(
                    not_before=cert.not_valid_before_utc,
                    not_after=cert.not_valid_after_utc
                ),
                serial_number=f"{cert.serial_number:X}",
                sans=san_from_extensions(cert.extensions),
                public_key_algorithm=algorithm,
                public_key_size=size,
                fingerprint=utils.calculate_fingerprint(pem.public_key_der(public_key)),
                certificate_fingerprint=utils.calculate_fingerprint(
                    cert.public_bytes(serialization.Encoding.DER)
                ),
                signature_algorithm=utils.describe_signature(cert.signature_algorithm_oid),
                version=cert.version.value + 1
            )
        except pem.X509_ERRORS as e:
            raise PemParseError(f"Certificat illisible: {e}") from e


# Instance par défaut
cert_decoder = CertificateDecoder()

__all__ = ['CertificateDecoder', 'cert_decoder']
