"""
Générateur de paires de clés (RSA et ECC)
Aucune substitution silencieuse: une courbe inconnue est refusée explicitement
"""

import logging
from typing import Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa, ec
from tqdm import tqdm

from . import config
from . import pem
from .exceptions import KeyGenerationError, UnsupportedAlgorithm
from .models import KeyAlgorithm, KeyPair, PrivateKeyTypes

logger = logging.getLogger(__name__)

_CURVE_CLASSES = {
    "secp256r1": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "secp521r1": ec.SECP521R1
}


class KeyPairGenerator:
    """
    Classe pour générer les paires de clés RSA et ECC
    """

    # ============================================
    # 🎯 POINT D'ENTRÉE
    # ============================================

    def generate(
            self,
            algorithm: Union[str, KeyAlgorithm],
            size_or_curve: Union[int, str, None] = None,
            show_progress: bool = False
    ) -> KeyPair:
        """
        Génère une paire de clés

        Args:
            algorithm: "RSA" ou "EC"
            size_or_curve: Taille en bits pour RSA; nom de courbe ou taille
                (256, 384, 521) pour EC. None = valeur par défaut
            show_progress: Afficher une barre de progression

        Returns:
            KeyPair: Paire de clés générée

        Raises:
            UnsupportedAlgorithm: Algorithme ou courbe non supportés
            KeyGenerationError: Taille sous le seuil ou échec de génération
        """
        key_algorithm = KeyAlgorithm.parse(algorithm)

        if key_algorithm is KeyAlgorithm.RSA:
            key_size = config.DEFAULT_RSA_KEY_SIZE if size_or_curve is None else size_or_curve
            private_key = self.generate_rsa_key(key_size, show_progress)
            return KeyPair(
                algorithm=KeyAlgorithm.RSA,
                private_key=private_key,
                public_key=private_key.public_key(),
                key_size=private_key.key_size
            )

        curve_name = self.resolve_curve(size_or_curve)
        private_key = self.generate_ecc_key(curve_name, show_progress)
        return KeyPair(
            algorithm=KeyAlgorithm.EC,
            private_key=private_key,
            public_key=private_key.public_key(),
            key_size=private_key.curve.key_size,
            curve=curve_name
        )

    # ============================================
    # 🔐 GÉNÉRATION DE CLÉS RSA
    # ============================================

    def generate_rsa_key(self, key_size: int, show_progress: bool = False) -> rsa.RSAPrivateKey:
        """
        Génère une clé privée RSA

        Raises:
            KeyGenerationError: Taille invalide, sous le seuil, ou échec backend
        """
        if isinstance(key_size, bool) or not isinstance(key_size, int):
            try:
                key_size = int(str(key_size).strip())
            except ValueError:
                raise KeyGenerationError(f"Taille de clé RSA invalide: {key_size!r}") from None

        if key_size < config.RSA_MIN_KEY_SIZE:
            raise KeyGenerationError(
                f"Taille de clé RSA trop faible: {key_size} bits "
                f"(minimum {config.RSA_MIN_KEY_SIZE})"
            )
        if key_size < config.RSA_RECOMMENDED_MIN_KEY_SIZE:
            logger.warning(
                "Clé RSA de %d bits: %d bits minimum recommandés",
                key_size, config.RSA_RECOMMENDED_MIN_KEY_SIZE
            )

        logger.info("Génération d'une clé RSA de %d bits", key_size)

        try:
            with tqdm(total=100, desc=f"RSA {key_size}", disable=not show_progress,
                      bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt}") as pbar:
                private_key = rsa.generate_private_key(
                    public_exponent=config.RSA_PUBLIC_EXPONENT,
                    key_size=key_size
                )
                pbar.update(100)
        except ValueError as e:
            raise KeyGenerationError(f"Échec de la génération RSA {key_size} bits: {e}") from e

        return private_key

    # ============================================
    # 🔐 GÉNÉRATION DE CLÉS ECC
    # ============================================

    def resolve_curve(self, size_or_curve: Union[int, str, None]) -> str:
        """
        Détermine le nom canonique de la courbe demandée

        Raises:
            UnsupportedAlgorithm: Courbe ou taille sans courbe nommée correspondante
        """
        if size_or_curve is None:
            return config.DEFAULT_ECC_CURVE

        if isinstance(size_or_curve, int) and not isinstance(size_or_curve, bool):
            curve_name = config.curve_for_size(size_or_curve)
        elif isinstance(size_or_curve, str) and size_or_curve.strip().isdigit():
            curve_name = config.curve_for_size(int(size_or_curve))
        elif isinstance(size_or_curve, str):
            curve_name = config.normalize_curve_name(size_or_curve)
        else:
            curve_name = None

        if curve_name not in _CURVE_CLASSES:
            raise UnsupportedAlgorithm(
                f"Courbe ECC non supportée: {size_or_curve}. "
                f"Courbes autorisées: {list(config.ECC_CURVES.keys())}"
            )
        return curve_name

    def generate_ecc_key(self, curve_name: str, show_progress: bool = False) -> ec.EllipticCurvePrivateKey:
        """Génère une clé privée ECC sur une courbe nommée"""
        logger.info("Génération d'une clé ECC (courbe %s)", curve_name)

        with tqdm(total=100, desc=f"ECC {curve_name}", disable=not show_progress,
                  bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt}") as pbar:
            private_key = ec.generate_private_key(_CURVE_CLASSES[curve_name]())
            pbar.update(100)

        return private_key

    # ============================================
    # 🔍 INFORMATIONS SUR LES CLÉS
    # ============================================

    def describe(self, private_key: PrivateKeyTypes) -> dict:
        """
        Récupère les informations détaillées sur une clé

        Returns:
            dict: Informations (type, taille, courbe, etc.)
        """
        info = {}

        if isinstance(private_key, rsa.RSAPrivateKey):
            info['type'] = 'RSA'
            info['size'] = private_key.key_size
            info['public_exponent'] = private_key.public_key().public_numbers().e
        elif isinstance(private_key, ec.EllipticCurvePrivateKey):
            info['type'] = 'EC'
            info['curve'] = private_key.curve.name
            info['size'] = private_key.curve.key_size

        return info


# ============================================
# 💾 EXPORT PEM
# ============================================

def private_key_to_pem(private_key: PrivateKeyTypes, password: Optional[str] = None) -> str:
    """
    Exporte une clé privée en PEM PKCS#8, chiffrée si un mot de passe est fourni
    """
    if password:
        encryption = serialization.BestAvailableEncryption(password.encode())
        kind = pem.PemKind.ENCRYPTED_PRIVATE_KEY
    else:
        encryption = serialization.NoEncryption()
        kind = pem.PemKind.PRIVATE_KEY

    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption
    )
    return pem.encode(kind, der)


def public_key_to_pem(public_key) -> str:
    """Exporte une clé publique en PEM SubjectPublicKeyInfo"""
    return pem.encode(pem.PemKind.PUBLIC_KEY, pem.public_key_der(public_key))


# Instance par défaut pour utilisation directe
keygen = KeyPairGenerator()

__all__ = [
    'KeyPairGenerator',
    'keygen',
    'private_key_to_pem',
    'public_key_to_pem'
]
