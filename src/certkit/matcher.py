"""
Correspondance clé privée / certificat
Comparaison octet par octet des encodages SubjectPublicKeyInfo
"""

import logging
from typing import Optional

from . import pem
from .exceptions import CertKitError

logger = logging.getLogger(__name__)


def same_public_key(first, second) -> bool:
    """
    True si deux clés publiques ont le même encodage canonique (SPKI DER)

    Fonctionne pour RSA, EC et tout autre type supporté par cryptography.
    """
    return pem.public_key_der(first) == pem.public_key_der(second)


class KeyCertMatcher:
    """
    Vérifie qu'une clé privée et un certificat forment une paire
    """

    def matches(
            self,
            private_key_pem: pem.PemInput,
            certificate_pem: pem.PemInput,
            key_password: Optional[str] = None
    ) -> bool:
        """
        Compare la clé publique dérivée de la clé privée à celle du certificat

        Ne lève jamais d'exception: une entrée inutilisable donne False.
        """
        try:
            private_key = pem.load_private_key(private_key_pem, key_password)
            certificate = pem.load_certificate(certificate_pem)
            result = same_public_key(private_key.public_key(), certificate.public_key())
        except (CertKitError, AttributeError) + pem.X509_ERRORS as e:
            logger.debug("Correspondance impossible à établir: %s", e)
            return False

        logger.debug("Clé et certificat %s", "correspondants" if result else "différents")
        return result


# Instance par défaut
key_cert_matcher = KeyCertMatcher()

__all__ = ['KeyCertMatcher', 'key_cert_matcher', 'same_public_key']
