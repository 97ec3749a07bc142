"""
certkit - Outils PKI en libre-service
=====================================

Utilitaires PKI sans état, implémentés en Python avec:
- Génération de clés RSA et ECC et de CSR signés (sujet + SAN)
- Décodage de CSR et de certificats X.509
- Archives PKCS#12 protégées par mot de passe
- Vérification de correspondance clé privée / certificat

Modules principaux:
- config: Configuration globale
- pem: Codec PEM
- keygen: Génération de clés
- naming / extensions: Sujet et Subject Alternative Name
- csr: Assemblage, signature et décodage des CSR
- certificate: Décodage des certificats
- pkcs12: Archives PKCS#12
- matcher: Correspondance clé / certificat
- toolkit: Façade des opérations

Version: 1.0.0
"""

__version__ = "1.0.0"

# Imports principaux
from . import config
from . import pem
from .exceptions import (
    CertKitError,
    InvalidSubject,
    UnsupportedAlgorithm,
    KeyGenerationError,
    PemParseError,
    SignatureError,
    ArchiveError,
)
from .models import (
    KeyAlgorithm,
    SignatureAlgorithm,
    SanKind,
    SanEntry,
    NameAttribute,
    DistinguishedName,
    KeyPair,
    CsrConfig,
    CertificationRequest,
    CsrResult,
    DecodedCsr,
    Validity,
    Certificate,
)
from .keygen import KeyPairGenerator
from .naming import DistinguishedNameBuilder
from .extensions import ExtensionBuilder
from .csr import CsrBuilder, Signer, CsrDecoder
from .certificate import CertificateDecoder
from .pkcs12 import Pkcs12Packager
from .matcher import KeyCertMatcher
from .toolkit import (
    generate_csr,
    generate_csr_async,
    decode_csr,
    decode_cert,
    generate_pfx,
    match_key_cert,
)

# Exports
__all__ = [
    'config',
    'pem',
    # Erreurs
    'CertKitError',
    'InvalidSubject',
    'UnsupportedAlgorithm',
    'KeyGenerationError',
    'PemParseError',
    'SignatureError',
    'ArchiveError',
    # Modèles
    'KeyAlgorithm',
    'SignatureAlgorithm',
    'SanKind',
    'SanEntry',
    'NameAttribute',
    'DistinguishedName',
    'KeyPair',
    'CsrConfig',
    'CertificationRequest',
    'CsrResult',
    'DecodedCsr',
    'Validity',
    'Certificate',
    # Composants
    'KeyPairGenerator',
    'DistinguishedNameBuilder',
    'ExtensionBuilder',
    'CsrBuilder',
    'Signer',
    'CsrDecoder',
    'CertificateDecoder',
    'Pkcs12Packager',
    'KeyCertMatcher',
    # Façade
    'generate_csr',
    'generate_csr_async',
    'decode_csr',
    'decode_cert',
    'generate_pfx',
    'match_key_cert',
]
