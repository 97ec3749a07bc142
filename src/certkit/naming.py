"""
Construction des Distinguished Names
Ordre d'ajout fixe: CN, C, ST, L, O, puis OU si présent
"""

import logging
from typing import Optional

from cryptography import x509
from cryptography.x509.oid import NameOID, ObjectIdentifier

from . import config, utils
from .exceptions import InvalidSubject
from .models import CsrConfig, DistinguishedName, NameAttribute

logger = logging.getLogger(__name__)

# Types d'attributs reconnus: OID -> (nom court, nom long)
ATTRIBUTE_TYPES = {
    NameOID.COMMON_NAME: ("CN", "commonName"),
    NameOID.COUNTRY_NAME: ("C", "countryName"),
    NameOID.STATE_OR_PROVINCE_NAME: ("ST", "stateOrProvinceName"),
    NameOID.LOCALITY_NAME: ("L", "localityName"),
    NameOID.ORGANIZATION_NAME: ("O", "organizationName"),
    NameOID.ORGANIZATIONAL_UNIT_NAME: ("OU", "organizationalUnitName"),
    NameOID.EMAIL_ADDRESS: ("E", "emailAddress"),
    NameOID.SERIAL_NUMBER: ("serialNumber", "serialNumber"),
    NameOID.STREET_ADDRESS: ("STREET", "streetAddress"),
    NameOID.DOMAIN_COMPONENT: ("DC", "domainComponent"),
}

_OID_BY_NAME = {names[1]: oid for oid, names in ATTRIBUTE_TYPES.items()}


class DistinguishedNameBuilder:
    """
    Construit et valide le sujet d'une demande de certificat
    """

    def build(self, csr_config: CsrConfig) -> DistinguishedName:
        """
        Construit le Distinguished Name ordonné d'une configuration CSR

        Les champs optionnels vides sont omis; l'ordre des autres est conservé.

        Raises:
            InvalidSubject: CN vide, pays invalide, valeur trop longue ou
                contenant des caractères de contrôle
        """
        common_name = self._clean("commonName", csr_config.common_name)
        if not common_name:
            raise InvalidSubject("Le Common Name (CN) est obligatoire")

        country = self._clean("countryName", csr_config.country)
        if country:
            if len(country) != 2 or not (country.isascii() and country.isalpha()):
                raise InvalidSubject(
                    f"Le code pays doit contenir exactement 2 lettres (ISO 3166-1 alpha-2): {country!r}"
                )
            country = country.upper()

        ordered = [
            (NameOID.COMMON_NAME, common_name),
            (NameOID.COUNTRY_NAME, country),
            (NameOID.STATE_OR_PROVINCE_NAME, self._clean("stateOrProvinceName", csr_config.state)),
            (NameOID.LOCALITY_NAME, self._clean("localityName", csr_config.city)),
            (NameOID.ORGANIZATION_NAME, self._clean("organizationName", csr_config.organization)),
            (NameOID.ORGANIZATIONAL_UNIT_NAME,
             self._clean("organizationalUnitName", csr_config.organizational_unit)),
        ]

        attributes = []
        for oid, value in ordered:
            if value:
                short, name = ATTRIBUTE_TYPES[oid]
                attributes.append(NameAttribute(short=short, name=name, value=value))

        dn = DistinguishedName(tuple(attributes))
        logger.debug("Sujet construit: %s", dn.to_string())
        return dn

    def _clean(self, name: str, value: Optional[str]) -> str:
        if value is None:
            return ""
        if not isinstance(value, str):
            raise InvalidSubject(f"L'attribut {name} doit être une chaîne, reçu {type(value).__name__}")

        value = value.strip()
        if utils.has_control_characters(value):
            raise InvalidSubject(f"L'attribut {name} contient des caractères de contrôle")

        upper_bound = config.DN_UPPER_BOUNDS.get(name)
        if upper_bound and len(value) > upper_bound:
            raise InvalidSubject(
                f"L'attribut {name} dépasse {upper_bound} caractères ({len(value)})"
            )
        return value


# ============================================
# 🔄 CONVERSIONS cryptography <-> modèle
# ============================================

def to_x509_name(dn: DistinguishedName) -> x509.Name:
    """
    Convertit un DistinguishedName en x509.Name (un RDN par attribut, ordre conservé)
    """
    attributes = []
    for attr in dn.attributes:
        oid = _OID_BY_NAME.get(attr.name)
        if oid is None:
            oid = ObjectIdentifier(attr.name)
        attributes.append(x509.NameAttribute(oid, attr.value))
    return x509.Name(attributes)


def from_x509_name(name: x509.Name) -> DistinguishedName:
    """
    Convertit un x509.Name en DistinguishedName

    Les types hors de ATTRIBUTE_TYPES sont conservés sous leur OID pointé.
    """
    attributes = []
    for attr in name:
        short, long_name = ATTRIBUTE_TYPES.get(attr.oid, (attr.oid.dotted_string, attr.oid.dotted_string))
        value = attr.value
        if isinstance(value, bytes):
            value = utils.bytes_to_hex(value)
        attributes.append(NameAttribute(short=short, name=long_name, value=value))
    return DistinguishedName(tuple(attributes))


# Instance par défaut
dn_builder = DistinguishedNameBuilder()

__all__ = [
    'ATTRIBUTE_TYPES',
    'DistinguishedNameBuilder',
    'dn_builder',
    'to_x509_name',
    'from_x509_name'
]
