"""
Exceptions de certkit
Chaque type d'erreur est aussi une ValueError pour les appelants génériques
"""


class CertKitError(ValueError):
    """Erreur de base de toutes les opérations certkit"""


class InvalidSubject(CertKitError):
    """Common Name vide ou attribut du sujet invalide"""


class UnsupportedAlgorithm(CertKitError):
    """Algorithme ou courbe demandés non disponibles"""


class KeyGenerationError(CertKitError):
    """Taille de clé sous le seuil de sécurité ou échec de génération"""


class PemParseError(CertKitError):
    """Bloc PEM ou structure DER mal formés"""


class SignatureError(CertKitError):
    """Clé privée incompatible avec la demande, ou signature impossible"""


class ArchiveError(CertKitError):
    """Échec de construction de l'archive PKCS#12"""


__all__ = [
    'CertKitError',
    'InvalidSubject',
    'UnsupportedAlgorithm',
    'KeyGenerationError',
    'PemParseError',
    'SignatureError',
    'ArchiveError'
]
