"""
Archives PKCS#12 (PFX)
Regroupe une clé privée et son certificat (plus la chaîne éventuelle) sous mot de passe
"""

import logging
from typing import Iterable, List, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import PrivateFormat, pkcs12

from . import config, pem
from .exceptions import ArchiveError, PemParseError
from .matcher import same_public_key

logger = logging.getLogger(__name__)

CaInput = Union[pem.PemInput, Iterable[pem.PemInput], None]


class Pkcs12Packager:
    """
    Construit des archives PKCS#12 chiffrées
    """

    def package(
            self,
            private_key_pem: pem.PemInput,
            certificate_pem: pem.PemInput,
            password: Union[str, bytes],
            *,
            ca_certificates_pem: CaInput = None,
            friendly_name: Union[str, bytes, None] = config.PKCS12_DEFAULT_FRIENDLY_NAME,
            key_password: Optional[str] = None,
            legacy: bool = False
    ) -> bytes:
        """
        Produit l'archive PKCS#12 binaire

        Args:
            private_key_pem: Clé privée PEM
            certificate_pem: Certificat PEM (ou DER)
            password: Mot de passe de l'archive (obligatoire, str ou bytes)
            ca_certificates_pem: Bundle PEM ou liste de certificats de la chaîne
            friendly_name: Nom convivial de l'entrée
            key_password: Mot de passe de la clé privée si elle est chiffrée
            legacy: Chiffrement PBE-SHA1-3DES pour les lecteurs anciens
                (défaut: PBES2 AES-256-CBC, MAC HMAC-SHA256)

        Returns:
            bytes: Archive DER, à conserver telle quelle

        Raises:
            ArchiveError: Entrée illisible, mot de passe vide, clé et certificat
                non correspondants, ou échec de sérialisation
        """
        if not isinstance(password, (str, bytes)):
            raise ArchiveError(f"Mot de passe invalide: {type(password).__name__} (str ou bytes attendu)")
        if not password:
            raise ArchiveError("Un mot de passe est obligatoire pour l'archive PKCS#12")
        if isinstance(password, str):
            password = password.encode("utf-8")

        try:
            private_key = pem.load_private_key(private_key_pem, key_password)
            certificate = pem.load_certificate(certificate_pem)
            ca_certificates = self._load_ca_certificates(ca_certificates_pem)
        except PemParseError as e:
            raise ArchiveError(f"Entrée illisible: {e}") from e

        if not same_public_key(private_key.public_key(), certificate.public_key()):
            raise ArchiveError("La clé privée ne correspond pas au certificat")

        chain = order_chain(certificate, ca_certificates)
        if isinstance(friendly_name, str):
            friendly_name = friendly_name.encode("utf-8")
        name = friendly_name or None

        try:
            archive = pkcs12.serialize_key_and_certificates(
                name=name,
                key=private_key,
                cert=certificate,
                cas=chain or None,
                encryption_algorithm=self._encryption(password, legacy)
            )
        except (ValueError, TypeError) as e:
            raise ArchiveError(f"Échec de construction de l'archive: {e}") from e

        logger.info("Archive PKCS#12 créée (%d octets, %d certificat(s) de chaîne)", len(archive), len(chain))
        return archive

    def _load_ca_certificates(self, data: CaInput) -> List[x509.Certificate]:
        if not data:
            return []
        if isinstance(data, (str, bytes, bytearray)):
            return pem.load_certificates(data)
        return [pem.load_certificate(item) for item in data]

    def _encryption(self, password: bytes, legacy: bool):
        builder = PrivateFormat.PKCS12.encryption_builder().kdf_rounds(config.PKCS12_KDF_ROUNDS)
        if legacy:
            builder = builder.key_cert_algorithm(
                pkcs12.PBES.PBESv1SHA1And3KeyTripleDESCBC
            ).hmac_hash(hashes.SHA1())
        else:
            builder = builder.key_cert_algorithm(
                pkcs12.PBES.PBESv2SHA256AndAES256CBC
            ).hmac_hash(hashes.SHA256())
        return builder.build(password)


# ============================================
# 🔗 CHAÎNE DE CERTIFICATS
# ============================================

def order_chain(
        leaf: x509.Certificate,
        candidates: Iterable[x509.Certificate],
        max_depth: int = config.MAX_CHAIN_DEPTH
) -> List[x509.Certificate]:
    """
    Ordonne les certificats de chaîne de l'émetteur du certificat final vers la racine

    Le parcours émetteur -> sujet est borné à max_depth étapes (émetteurs
    circulaires). Les certificats non atteints sont ajoutés à la fin dans
    l'ordre d'entrée.
    """
    remaining = [cert for cert in candidates if cert != leaf]
    ordered = []
    current = leaf

    for _ in range(max_depth):
        if current.issuer == current.subject:
            break
        issuer = next((cert for cert in remaining if cert.subject == current.issuer), None)
        if issuer is None:
            break
        ordered.append(issuer)
        remaining.remove(issuer)
        current = issuer

    return ordered + remaining


# Instance par défaut
pkcs12_packager = Pkcs12Packager()

__all__ = ['Pkcs12Packager', 'pkcs12_packager', 'order_chain']
