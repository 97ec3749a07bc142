"""
Façade des opérations certkit
Fonctions pures et sans état: generate_csr, decode_csr, decode_cert,
generate_pfx, match_key_cert
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from . import csr, pem
from .certificate import cert_decoder
from .extensions import extension_builder
from .keygen import keygen as key_generator, private_key_to_pem, public_key_to_pem
from .matcher import key_cert_matcher
from .models import Certificate, CsrConfig, CsrResult, DecodedCsr, KeyAlgorithm
from .naming import dn_builder
from .pkcs12 import pkcs12_packager

logger = logging.getLogger(__name__)


# ============================================
# 📝 GÉNÉRATION DE CSR
# ============================================

def generate_csr(csr_config: Union[CsrConfig, Dict[str, Any]], show_progress: bool = False) -> CsrResult:
    """
    Génère une paire de clés et un CSR signé

    Étapes: clés -> sujet -> SAN -> assemblage -> signature -> export PEM

    Args:
        csr_config: Configuration (CsrConfig ou dictionnaire snake_case/camelCase)
        show_progress: Barre de progression pendant la génération de clé

    Returns:
        CsrResult: clé privée, clé publique et CSR en PEM

    Raises:
        InvalidSubject, UnsupportedAlgorithm, KeyGenerationError, SignatureError
    """
    if isinstance(csr_config, dict):
        csr_config = CsrConfig.from_dict(csr_config)

    # Validation du sujet avant la génération (coûteuse) de la clé
    subject = dn_builder.build(csr_config)
    sans = extension_builder.build_san(csr_config.sans)

    algorithm = KeyAlgorithm.parse(csr_config.algorithm)
    if algorithm is KeyAlgorithm.EC:
        size_or_curve = csr_config.curve or csr_config.key_size
    else:
        size_or_curve = csr_config.key_size

    key_pair = key_generator.generate(algorithm, size_or_curve, show_progress=show_progress)

    unsigned = csr.csr_builder.assemble(
        key_pair.public_key, subject, sans, csr_config.signature_algorithm
    )
    signed = csr.signer.sign(unsigned, key_pair.private_key)

    logger.info("CSR généré pour %s (%s %d bits)", subject.common_name,
                key_pair.algorithm.value, key_pair.key_size)

    return CsrResult(
        private_key_pem=private_key_to_pem(key_pair.private_key, csr_config.private_key_password),
        public_key_pem=public_key_to_pem(key_pair.public_key),
        csr_pem=csr.to_pem(signed)
    )


async def generate_csr_async(csr_config: Union[CsrConfig, Dict[str, Any]]) -> CsrResult:
    """generate_csr exécuté dans un thread de travail (génération RSA longue)"""
    return await asyncio.to_thread(generate_csr, csr_config)


# ============================================
# 🔍 DÉCODAGE
# ============================================

def decode_csr(csr_pem: pem.PemInput) -> Optional[DecodedCsr]:
    """Décode un CSR; None si l'entrée est inutilisable"""
    return csr.csr_decoder.decode(csr_pem)


def decode_cert(cert_pem: pem.PemInput) -> Optional[Certificate]:
    """Décode un certificat; None si l'entrée est inutilisable"""
    return cert_decoder.decode(cert_pem)


# ============================================
# 📦 PKCS#12 ET CORRESPONDANCE
# ============================================

def generate_pfx(key_pem: pem.PemInput, cert_pem: pem.PemInput, password: Union[str, bytes], **options) -> bytes:
    """
    Produit une archive PKCS#12 binaire

    Options: ca_certificates_pem, friendly_name, key_password, legacy

    Raises:
        ArchiveError
    """
    return pkcs12_packager.package(key_pem, cert_pem, password, **options)


def match_key_cert(key_pem: pem.PemInput, cert_pem: pem.PemInput, key_password: Optional[str] = None) -> bool:
    """True si la clé privée correspond au certificat; False sinon ou si illisible"""
    return key_cert_matcher.matches(key_pem, cert_pem, key_password)


__all__ = [
    'generate_csr',
    'generate_csr_async',
    'decode_csr',
    'decode_cert',
    'generate_pfx',
    'match_key_cert'
]
