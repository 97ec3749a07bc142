"""
Fonctions utilitaires pour certkit
"""

import hashlib
import logging
import re
from typing import Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import rsa, ec, ed25519, ed448
from cryptography.x509.oid import SignatureAlgorithmOID
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich import box

from . import config
from .models import Certificate, DecodedCsr, DistinguishedName

# Console Rich pour l'affichage
console = Console()

# Adresse IPv4 stricte: quatre octets décimaux 0-255
_OCTET = r"(25[0-5]|2[0-4]\d|1\d\d|[1-9]?\d)"
IPV4_PATTERN = re.compile(rf"^{_OCTET}\.{_OCTET}\.{_OCTET}\.{_OCTET}$")

# Noms lisibles des algorithmes de signature (OID -> nom)
SIGNATURE_NAMES = {
    SignatureAlgorithmOID.RSA_WITH_SHA1: "SHA1withRSA",
    SignatureAlgorithmOID.RSA_WITH_SHA224: "SHA224withRSA",
    SignatureAlgorithmOID.RSA_WITH_SHA256: "SHA256withRSA",
    SignatureAlgorithmOID.RSA_WITH_SHA384: "SHA384withRSA",
    SignatureAlgorithmOID.RSA_WITH_SHA512: "SHA512withRSA",
    SignatureAlgorithmOID.RSASSA_PSS: "RSASSA-PSS",
    SignatureAlgorithmOID.ECDSA_WITH_SHA1: "SHA1withECDSA",
    SignatureAlgorithmOID.ECDSA_WITH_SHA224: "SHA224withECDSA",
    SignatureAlgorithmOID.ECDSA_WITH_SHA256: "SHA256withECDSA",
    SignatureAlgorithmOID.ECDSA_WITH_SHA384: "SHA384withECDSA",
    SignatureAlgorithmOID.ECDSA_WITH_SHA512: "SHA512withECDSA",
    SignatureAlgorithmOID.ED25519: "Ed25519",
    SignatureAlgorithmOID.ED448: "Ed448",
}


# ============================================
# 📊 LOGS
# ============================================

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure le logger "certkit" avec un RichHandler

    La bibliothèque ne configure jamais les logs à l'import; la CLI appelle
    cette fonction au démarrage.

    Args:
        level: Niveau de log (défaut: config.LOG_LEVEL)
    """
    logger = logging.getLogger("certkit")
    logger.setLevel((level or config.LOG_LEVEL).upper())

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_DATE_FORMAT))
        logger.addHandler(handler)


# ============================================
# 🔐 FONCTIONS CRYPTOGRAPHIQUES
# ============================================

def bytes_to_hex(data: bytes, separator: str = ":") -> str:
    """
    Convertit des bytes en chaîne hexadécimale

    Args:
        data: Données binaires
        separator: Séparateur entre octets (ex: ":")

    Returns:
        str: Chaîne hexadécimale (ex: "A1:B2:C3")
    """
    hex_str = data.hex().upper()
    if separator:
        return separator.join(hex_str[i:i + 2] for i in range(0, len(hex_str), 2))
    return hex_str


def calculate_fingerprint(data: bytes) -> str:
    """
    Calcule l'empreinte SHA-256 d'un encodage DER (clé publique ou certificat)

    Args:
        data: Octets DER à hacher

    Returns:
        str: Empreinte au format hexadécimal avec séparateurs (ex: "A1:B2:C3:...")
    """
    hash_obj = hashlib.new(config.FINGERPRINT_ALGORITHM, data)
    return bytes_to_hex(hash_obj.digest(), config.FINGERPRINT_SEPARATOR)


def describe_public_key(public_key) -> Tuple[str, int]:
    """
    Retourne (algorithme, taille en bits) d'une clé publique

    Returns:
        tuple: ex ("RSA", 2048), ("EC secp256r1", 256)
    """
    if isinstance(public_key, rsa.RSAPublicKey):
        return "RSA", public_key.key_size
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        return f"EC {public_key.curve.name}", public_key.curve.key_size
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return "Ed25519", 256
    if isinstance(public_key, ed448.Ed448PublicKey):
        return "Ed448", 456
    return type(public_key).__name__, 0


def describe_signature(signature_oid) -> str:
    """Nom lisible d'un algorithme de signature (ex: "SHA256withRSA"), ou son OID pointé"""
    return SIGNATURE_NAMES.get(signature_oid, signature_oid.dotted_string)


def is_ipv4(value: str) -> bool:
    """True si la valeur est une adresse IPv4 pointée stricte"""
    return IPV4_PATTERN.match(value) is not None


def has_control_characters(value: str) -> bool:
    """True si la chaîne contient un caractère de contrôle (NUL, retour ligne...)"""
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value)


# ============================================
# 🎨 AFFICHAGE CLI AVEC RICH
# ============================================

def print_success(message: str) -> None:
    """Affiche un message de succès avec symbole et couleur verte"""
    color = config.CLI_COLORS["success"]
    console.print(f"[{color}]{config.CLI_SYMBOLS['success']} {message}[/{color}]")


def print_error(message: str) -> None:
    """Affiche un message d'erreur avec symbole et couleur rouge"""
    color = config.CLI_COLORS["error"]
    console.print(f"[{color}]{config.CLI_SYMBOLS['error']} {message}[/{color}]")


def print_warning(message: str) -> None:
    """Affiche un avertissement avec symbole et couleur jaune"""
    color = config.CLI_COLORS["warning"]
    console.print(f"[{color}]{config.CLI_SYMBOLS['warning']} {message}[/{color}]")


def print_info(message: str) -> None:
    """Affiche une information avec symbole et couleur cyan"""
    color = config.CLI_COLORS["info"]
    console.print(f"[{color}]{config.CLI_SYMBOLS['info']} {message}[/{color}]")


def print_header(title: str) -> None:
    """
    Affiche un en-tête stylisé avec bordure

    Args:
        title: Titre à afficher
    """
    console.print()
    console.print(Panel.fit(
        f"[bold magenta]{title}[/bold magenta]",
        border_style="magenta",
        box=box.DOUBLE
    ))
    console.print()


def create_table(title: str, columns: list) -> Table:
    """
    Crée une table Rich stylisée prête à être remplie

    Args:
        title: Titre de la table
        columns: Liste des noms de colonnes

    Returns:
        Table: Table Rich
    """
    table = Table(
        title=title,
        title_style="bold cyan",
        border_style="blue",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for col in columns:
        table.add_column(col)

    return table


def _add_name_rows(table: Table, label: str, dn: DistinguishedName, style: str) -> None:
    for attr in dn.attributes:
        table.add_row(f"{label} {attr.short}", f"[{style}]{attr.value}[/{style}]")


def display_cert_info(cert: Certificate) -> None:
    """
    Affiche les informations d'un certificat décodé de manière formatée

    Args:
        cert: Certificat décodé à afficher
    """
    table = create_table(f"{config.CLI_SYMBOLS['cert']} Informations du certificat", ["Champ", "Valeur"])

    _add_name_rows(table, "Sujet", cert.subject, "cyan")
    _add_name_rows(table, "Émetteur", cert.issuer, "yellow")

    table.add_row("N° Série", f"[green]{cert.serial_number}[/green]")

    # Validité
    table.add_row("Valide de", cert.validity.not_before.strftime("%Y-%m-%d %H:%M:%S UTC"))
    table.add_row("Valide jusqu'à", cert.validity.not_after.strftime("%Y-%m-%d %H:%M:%S UTC"))
    days = cert.validity.days_remaining()
    days_style = "green" if days > 30 else ("yellow" if days >= 0 else "red")
    table.add_row("Jours restants", f"[{days_style}]{days}[/{days_style}]")

    if cert.sans:
        table.add_row("SAN", ", ".join(str(san) for san in cert.sans))

    table.add_row("Clé publique", f"{cert.public_key_algorithm} {cert.public_key_size} bits")
    table.add_row("Signature", cert.signature_algorithm or "inconnue")
    table.add_row("Empreinte clé (SHA-256)", f"[dim]{cert.fingerprint}[/dim]")
    table.add_row("Empreinte cert. (SHA-256)", f"[dim]{cert.certificate_fingerprint}[/dim]")

    console.print(table)


def display_csr_info(csr: DecodedCsr) -> None:
    """Affiche les informations d'un CSR décodé"""
    table = create_table(f"{config.CLI_SYMBOLS['csr']} Informations du CSR", ["Champ", "Nom", "Valeur"])

    for attr in csr.subject.attributes:
        table.add_row(attr.short, attr.name, f"[cyan]{attr.value}[/cyan]")

    for san in csr.sans:
        table.add_row("SAN", san.kind.value, san.value)

    table.add_row("Clé", csr.public_key_algorithm, f"{csr.public_key_size} bits")
    signature_status = "[green]valide[/green]" if csr.signature_valid else "[red]invalide[/red]"
    table.add_row("Signature", csr.signature_algorithm or "inconnue", signature_status)

    console.print(table)


__all__ = [
    # Logs
    'setup_logging',

    # Crypto
    'bytes_to_hex', 'calculate_fingerprint', 'describe_public_key', 'describe_signature', 'is_ipv4', 'has_control_characters', 'IPV4_PATTERN',

    # Affichage CLI
    'print_success', 'print_error', 'print_warning', 'print_info', 'print_header',
    'create_table', 'display_cert_info', 'display_csr_info',

    # Console Rich
    'console'
]
