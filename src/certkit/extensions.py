"""
Extension Subject Alternative Name
Classification syntaxique IP/DNS et encodage ASN.1 de la demande d'extension
"""

import logging
from typing import Iterable, List, Optional, Tuple

from asn1crypto import x509 as asn1_x509
from cryptography import x509

from . import utils
from .exceptions import InvalidSubject
from .models import SanEntry, SanKind

logger = logging.getLogger(__name__)


class ExtensionBuilder:
    """
    Construit les entrées SAN d'une demande de certificat
    """

    def build_san(self, values: Optional[Iterable[str]]) -> List[SanEntry]:
        """
        Classe chaque valeur en IP (IPv4 pointée stricte) ou DNS (tout le reste,
        y compris les jokers "*.example.com")

        Les valeurs vides et les doublons sont ignorés, l'ordre est conservé.
        Une entrée vide donne une liste vide (extension omise).

        Raises:
            InvalidSubject: Valeur non textuelle ou contenant des espaces/contrôles
        """
        entries = []
        seen = set()

        for raw in values or ():
            if not isinstance(raw, str):
                raise InvalidSubject(f"Entrée SAN invalide: {raw!r}")

            value = raw.strip()
            # Les noms DNS ne sont pas sensibles à la casse: la première graphie est conservée
            key = value.lower()
            if not value or key in seen:
                continue
            if utils.has_control_characters(value) or any(ch.isspace() for ch in value):
                raise InvalidSubject(f"Entrée SAN invalide (espaces ou caractères de contrôle): {raw!r}")

            seen.add(key)
            kind = SanKind.IP if utils.is_ipv4(value) else SanKind.DNS
            entries.append(SanEntry(kind=kind, value=value))

        logger.debug("SAN: %s", ", ".join(str(e) for e in entries) or "aucun")
        return entries

    def to_asn1_extensions(self, entries: Iterable[SanEntry]) -> Optional[asn1_x509.Extensions]:
        """
        Encode les entrées en extension subjectAltName non critique

        Returns:
            Extensions asn1crypto, ou None si aucune entrée
        """
        entries = list(entries)
        if not entries:
            return None

        general_names = asn1_x509.GeneralNames([self._general_name(entry) for entry in entries])
        extension = asn1_x509.Extension({
            'extn_id': 'subject_alt_name',
            'critical': False,
            'extn_value': general_names
        })
        return asn1_x509.Extensions([extension])

    def _general_name(self, entry: SanEntry) -> asn1_x509.GeneralName:
        try:
            if entry.kind is SanKind.IP:
                return asn1_x509.GeneralName(name='ip_address', value=entry.value)
            if entry.kind is SanKind.DNS:
                return asn1_x509.GeneralName(name='dns_name', value=entry.value)
        except (UnicodeError, ValueError) as e:
            raise InvalidSubject(f"Entrée SAN non encodable {entry}: {e}") from e
        raise InvalidSubject(f"Type SAN non supporté pour une demande: {entry.kind.value}")


# ============================================
# 🔍 DÉCODAGE
# ============================================

def san_from_extensions(extensions: x509.Extensions) -> Tuple[SanEntry, ...]:
    """
    Extrait les entrées SAN d'un ensemble d'extensions cryptography

    Les noms d'autres types (otherName, directoryName...) sont ignorés.
    """
    try:
        san = extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        return ()

    entries = []
    for general_name in san:
        if isinstance(general_name, x509.DNSName):
            entries.append(SanEntry(SanKind.DNS, general_name.value))
        elif isinstance(general_name, x509.IPAddress):
            entries.append(SanEntry(SanKind.IP, str(general_name.value)))
        elif isinstance(general_name, x509.RFC822Name):
            entries.append(SanEntry(SanKind.EMAIL, general_name.value))
        elif isinstance(general_name, x509.UniformResourceIdentifier):
            entries.append(SanEntry(SanKind.URI, general_name.value))
        else:
            logger.debug("Entrée SAN ignorée: %s", type(general_name).__name__)
    return tuple(entries)


# Instance par défaut
extension_builder = ExtensionBuilder()

__all__ = [
    'ExtensionBuilder',
    'extension_builder',
    'san_from_extensions'
]
