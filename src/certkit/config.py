"""
Configuration globale de certkit
Contient toutes les constantes et paramètres du projet
"""

import os

# ============================================
# 🔐 PARAMÈTRES CRYPTOGRAPHIQUES
# ============================================

# Taille minimale acceptée pour RSA (en dessous: refus)
RSA_MIN_KEY_SIZE = 1024

# Taille en dessous de laquelle un avertissement est émis
RSA_RECOMMENDED_MIN_KEY_SIZE = 2048

# Taille RSA par défaut (surchargeable par variable d'environnement)
DEFAULT_RSA_KEY_SIZE = int(os.environ.get("CERTKIT_DEFAULT_RSA_KEY_SIZE", "2048"))

# Exposant public RSA (standard)
RSA_PUBLIC_EXPONENT = 65537

# Courbes ECC supportées (nom canonique -> taille en bits)
ECC_CURVES = {
    "secp256r1": 256,  # NIST P-256 (recommandé)
    "secp384r1": 384,  # NIST P-384
    "secp521r1": 521   # NIST P-521
}

# Alias acceptés pour les courbes (noms NIST / OpenSSL)
ECC_CURVE_ALIASES = {
    "p-256": "secp256r1",
    "p256": "secp256r1",
    "prime256v1": "secp256r1",
    "p-384": "secp384r1",
    "p384": "secp384r1",
    "p-521": "secp521r1",
    "p521": "secp521r1"
}

DEFAULT_ECC_CURVE = "secp256r1"

# Algorithmes de hachage autorisés pour signer un CSR
SIGNATURE_ALGORITHMS = ["SHA256", "SHA384", "SHA512"]

# Algorithme de hachage par défaut
DEFAULT_HASH_ALGORITHM = "SHA256"

# Empreintes (fingerprints)
FINGERPRINT_ALGORITHM = "sha256"
FINGERPRINT_SEPARATOR = ":"

# ============================================
# 📜 PARAMÈTRES DU SUJET (X.520)
# ============================================

# Bornes supérieures des attributs (RFC 5280, annexe A)
DN_UPPER_BOUNDS = {
    "commonName": 64,
    "countryName": 2,
    "stateOrProvinceName": 128,
    "localityName": 128,
    "organizationName": 64,
    "organizationalUnitName": 64
}

# ============================================
# 📦 PARAMÈTRES PKCS#12
# ============================================

# Nombre d'itérations de la dérivation de clé (PBKDF2)
PKCS12_KDF_ROUNDS = int(os.environ.get("CERTKIT_PKCS12_KDF_ROUNDS", "50000"))

# Nom convivial par défaut de l'entrée clé/certificat
PKCS12_DEFAULT_FRIENDLY_NAME = None

# ============================================
# 🔗 CHAÎNE DE CERTIFICATS
# ============================================

# Profondeur maximale de parcours émetteur -> sujet (boucles émetteurs circulaires)
MAX_CHAIN_DEPTH = 5

# ============================================
# 📊 PARAMÈTRES DE LOGS
# ============================================

LOG_LEVEL = os.environ.get("CERTKIT_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# ============================================
# 🎨 PARAMÈTRES D'AFFICHAGE CLI
# ============================================

# Couleurs pour Rich
CLI_COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "cyan",
    "header": "magenta bold",
    "cert": "blue",
    "key": "yellow"
}

# Symboles pour l'affichage
CLI_SYMBOLS = {
    "success": "✓",
    "error": "✗",
    "warning": "⚠",
    "info": "ℹ",
    "cert": "📜",
    "csr": "📝",
    "key": "🔑",
    "pfx": "📦",
    "match": "🔍"
}

# Permissions des fichiers écrits par la CLI (Unix)
PRIVATE_KEY_PERMISSIONS = 0o600  # rw------- (propriétaire seulement)
PUBLIC_FILE_PERMISSIONS = 0o644  # rw-r--r-- (lecture publique)


# ============================================
# 🛠️ FONCTIONS UTILITAIRES DE CONFIG
# ============================================

def normalize_curve_name(name: str) -> str:
    """
    Retourne le nom canonique d'une courbe elliptique

    Args:
        name: Nom ou alias de la courbe (ex: "P-256", "prime256v1")

    Returns:
        str: Nom canonique (ex: "secp256r1"), ou le nom d'origine en minuscules
    """
    lowered = name.strip().lower()
    return ECC_CURVE_ALIASES.get(lowered, lowered)


def curve_for_size(bits: int):
    """Retourne la courbe canonique correspondant à une taille en bits, ou None"""
    for curve_name, size in ECC_CURVES.items():
        if size == bits:
            return curve_name
    return None


# ============================================
# 🚀 EXPORTS
# ============================================

__all__ = [
    # Paramètres crypto
    'RSA_MIN_KEY_SIZE', 'RSA_RECOMMENDED_MIN_KEY_SIZE', 'DEFAULT_RSA_KEY_SIZE', 'RSA_PUBLIC_EXPONENT',
    'ECC_CURVES', 'ECC_CURVE_ALIASES', 'DEFAULT_ECC_CURVE',
    'SIGNATURE_ALGORITHMS', 'DEFAULT_HASH_ALGORITHM', 'FINGERPRINT_ALGORITHM', 'FINGERPRINT_SEPARATOR',

    # Sujet
    'DN_UPPER_BOUNDS',

    # PEM / PKCS#12 / chaîne
    'PKCS12_KDF_ROUNDS', 'PKCS12_DEFAULT_FRIENDLY_NAME', 'MAX_CHAIN_DEPTH',

    # Logs
    'LOG_LEVEL', 'LOG_FORMAT', 'LOG_DATE_FORMAT',

    # Interface CLI
    'CLI_COLORS', 'CLI_SYMBOLS', 'PRIVATE_KEY_PERMISSIONS', 'PUBLIC_FILE_PERMISSIONS',

    # Fonctions utilitaires
    'normalize_curve_name', 'curve_for_size'
]
