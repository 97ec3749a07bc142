"""
Modèles de données pour certkit
Objets-valeurs construits, consommés et jetés dans un seul appel
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Tuple, Dict, Any, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa, ec

from .exceptions import UnsupportedAlgorithm

# Types de clés supportés
PrivateKeyTypes = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]
PublicKeyTypes = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]


# ============================================
# 🔢 ÉNUMÉRATIONS
# ============================================

class KeyAlgorithm(str, Enum):
    """Famille de clé asymétrique"""
    RSA = "RSA"
    EC = "EC"

    @classmethod
    def parse(cls, value: Union[str, "KeyAlgorithm"]) -> "KeyAlgorithm":
        """
        Convertit une chaîne ("rsa", "EC", "ecc", "ecdsa") en KeyAlgorithm

        Raises:
            UnsupportedAlgorithm: Si l'algorithme est inconnu
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper()
        if normalized in ("ECC", "ECDSA"):
            normalized = "EC"
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedAlgorithm(
                f"Algorithme de clé non supporté: {value}. "
                f"Valeurs autorisées: {[a.value for a in cls]}"
            ) from None


class SignatureAlgorithm(str, Enum):
    """Algorithme de hachage utilisé pour signer une demande"""
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"

    @classmethod
    def parse(cls, value: Union[str, "SignatureAlgorithm"]) -> "SignatureAlgorithm":
        """Accepte "sha256", "SHA-384", etc."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().upper().replace("-", "")
        try:
            return cls(normalized)
        except ValueError:
            raise UnsupportedAlgorithm(
                f"Algorithme de signature non supporté: {value}. "
                f"Valeurs autorisées: {[a.value for a in cls]}"
            ) from None

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        """Instance cryptography du hachage correspondant"""
        return {
            SignatureAlgorithm.SHA256: hashes.SHA256,
            SignatureAlgorithm.SHA384: hashes.SHA384,
            SignatureAlgorithm.SHA512: hashes.SHA512,
        }[self]()


class SanKind(str, Enum):
    """Type d'entrée Subject Alternative Name"""
    DNS = "DNS"
    IP = "IP"
    # Rencontrés uniquement au décodage de certificats existants
    EMAIL = "EMAIL"
    URI = "URI"


# ============================================
# 👤 SUJET ET EXTENSIONS
# ============================================

@dataclass(frozen=True)
class NameAttribute:
    """Un attribut (type, valeur) d'un Distinguished Name"""
    short: str
    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"short": self.short, "name": self.name, "value": self.value}


@dataclass(frozen=True)
class DistinguishedName:
    """
    Distinguished Name X.509 ordonné

    L'ordre des attributs est celui de l'encodage (pas de tri).
    """
    attributes: Tuple[NameAttribute, ...] = ()

    def get(self, short: str) -> Optional[str]:
        """Valeur du premier attribut portant ce nom court (ex: "CN")"""
        for attr in self.attributes:
            if attr.short == short:
                return attr.value
        return None

    @property
    def common_name(self) -> Optional[str]:
        return self.get("CN")

    def to_string(self) -> str:
        """Rendu lisible "CN=a.com, C=US, ..." dans l'ordre d'encodage"""
        parts = []
        for attr in self.attributes:
            value = attr.value.replace("\\", "\\\\").replace(",", "\\,")
            parts.append(f"{attr.short}={value}")
        return ", ".join(parts)

    def to_list(self) -> List[Dict[str, str]]:
        return [attr.to_dict() for attr in self.attributes]

    def __len__(self) -> int:
        return len(self.attributes)


@dataclass(frozen=True)
class SanEntry:
    """Entrée SAN étiquetée (DNS ou IP)"""
    kind: SanKind
    value: str

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.value}"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.kind.value, "value": self.value}


# ============================================
# 🔑 CLÉS
# ============================================

@dataclass(frozen=True)
class KeyPair:
    """
    Paire de clés asymétriques

    Le matériel cryptographique n'est jamais modifié après création.
    """
    algorithm: KeyAlgorithm
    private_key: PrivateKeyTypes
    public_key: PublicKeyTypes
    key_size: int
    curve: Optional[str] = None


# ============================================
# 📝 DEMANDE DE CERTIFICAT
# ============================================

@dataclass
class CsrConfig:
    """
    Paramètres fournis par l'appelant pour générer un CSR
    """
    common_name: str
    organization: str = ""
    organizational_unit: Optional[str] = None
    city: str = ""
    state: str = ""
    country: str = ""
    sans: List[str] = field(default_factory=list)
    key_size: Optional[int] = None
    algorithm: str = "RSA"
    curve: Optional[str] = None
    signature_algorithm: str = "SHA256"
    private_key_password: Optional[str] = None

    # Clés du format camelCase d'origine -> nom de champ
    _ALIASES = {
        "commonName": "common_name",
        "organizationalUnit": "organizational_unit",
        "keySize": "key_size",
        "signatureAlg": "signature_algorithm",
        "signatureAlgorithm": "signature_algorithm",
        "privateKeyPassword": "private_key_password",
        "locality": "city",
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CsrConfig":
        """
        Construit une configuration depuis un dictionnaire

        Accepte indifféremment les noms snake_case et camelCase
        (ex: "commonName", "signatureAlg"). Les clés inconnues sont ignorées.
        """
        known = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in data.items():
            name = cls._ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        if "common_name" not in kwargs:
            kwargs["common_name"] = ""
        if isinstance(kwargs.get("sans"), str):
            kwargs["sans"] = [kwargs["sans"]]
        return cls(**kwargs)


@dataclass(frozen=True)
class CertificationRequest:
    """
    Demande de certificat PKCS#10

    Non signée tant que `signature` est None; passe à l'état signé une seule fois.
    """
    public_key_der: bytes
    subject: DistinguishedName
    extensions: Tuple[SanEntry, ...]
    signature_algorithm: SignatureAlgorithm
    tbs_bytes: bytes
    signature: Optional[bytes] = None
    der: Optional[bytes] = None

    @property
    def is_signed(self) -> bool:
        return self.signature is not None


@dataclass(frozen=True)
class CsrResult:
    """Artefacts PEM produits par generate_csr"""
    private_key_pem: str
    public_key_pem: str
    csr_pem: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "privateKeyPem": self.private_key_pem,
            "publicKeyPem": self.public_key_pem,
            "csrPem": self.csr_pem,
        }


@dataclass(frozen=True)
class DecodedCsr:
    """Vue en lecture seule d'un CSR décodé"""
    subject: DistinguishedName
    sans: Tuple[SanEntry, ...]
    public_key_algorithm: str
    public_key_size: int
    signature_algorithm: Optional[str]
    signature_valid: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject.to_list(),
            "sans": [str(san) for san in self.sans],
            "publicKey": {"algorithm": self.public_key_algorithm, "size": self.public_key_size},
            "signatureAlgorithm": self.signature_algorithm,
            "signatureValid": self.signature_valid,
        }


# ============================================
# 📜 CERTIFICAT DÉCODÉ
# ============================================

@dataclass(frozen=True)
class Validity:
    """Fenêtre de validité (datetimes UTC)"""
    not_before: datetime
    not_after: datetime

    def days_remaining(self, now: Optional[datetime] = None) -> int:
        """Jours restants avant expiration (négatif si expiré)"""
        now = now or datetime.now(timezone.utc)
        return (self.not_after - now).days

    def is_current(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.not_before <= now <= self.not_after


@dataclass(frozen=True)
class Certificate:
    """
    Vue en lecture seule d'un certificat X.509

    Entièrement dérivée des octets d'entrée.
    """
    subject: DistinguishedName
    issuer: DistinguishedName
    validity: Validity
    serial_number: str
    sans: Tuple[SanEntry, ...]
    public_key_algorithm: str
    public_key_size: int
    fingerprint: str
    certificate_fingerprint: str
    signature_algorithm: Optional[str]
    version: int

    @property
    def is_self_issued(self) -> bool:
        return self.subject == self.issuer

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subject": self.subject.to_list(),
            "issuer": self.issuer.to_list(),
            "validity": {
                "from": self.validity.not_before.isoformat(),
                "to": self.validity.not_after.isoformat(),
            },
            "sans": [str(san) for san in self.sans],
            "serial": self.serial_number,
            "fingerprint": self.fingerprint,
            "certificateFingerprint": self.certificate_fingerprint,
            "publicKey": {"algorithm": self.public_key_algorithm, "size": self.public_key_size},
            "signatureAlgorithm": self.signature_algorithm,
            "version": self.version,
        }


__all__ = [
    'PrivateKeyTypes',
    'PublicKeyTypes',
    'KeyAlgorithm',
    'SignatureAlgorithm',
    'SanKind',
    'NameAttribute',
    'DistinguishedName',
    'SanEntry',
    'KeyPair',
    'CsrConfig',
    'CertificationRequest',
    'CsrResult',
    'DecodedCsr',
    'Validity',
    'Certificate'
]
