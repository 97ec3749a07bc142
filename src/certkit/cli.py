#!/usr/bin/env python3
"""
Interface en ligne de commande de certkit
=========================================

Sous-commandes:
- csr          : génère clé privée, clé publique et CSR
- decode-csr   : affiche le contenu d'un CSR
- decode-cert  : affiche le contenu d'un certificat
- pfx          : crée une archive PKCS#12
- match        : vérifie la correspondance clé privée / certificat
"""

import argparse
import os
import re
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__, config, toolkit, utils
from .exceptions import CertKitError
from .models import CsrConfig


# ============================================
# 📁 FICHIERS
# ============================================

def _write_file(path: Path, data: bytes, permissions: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    if os.name != 'nt':  # Pas Windows
        os.chmod(path, permissions)


def _entity_name(common_name: str) -> str:
    """Nom de fichier dérivé du CN ("*.example.com" -> "wildcard.example.com")"""
    name = common_name.strip().replace("*", "wildcard").replace(" ", "_").lower()
    return re.sub(r"[^a-z0-9._-]", "_", name) or "request"


# ============================================
# 🎯 SOUS-COMMANDES
# ============================================

def cmd_csr(args: argparse.Namespace) -> int:
    utils.print_header(f"{config.CLI_SYMBOLS['csr']} Génération du CSR: {args.cn}")

    csr_config = CsrConfig(
        common_name=args.cn,
        organization=args.org,
        organizational_unit=args.ou,
        city=args.city,
        state=args.state,
        country=args.country,
        sans=args.san or [],
        key_size=args.key_size,
        algorithm=args.algorithm,
        curve=args.curve,
        signature_algorithm=args.digest,
        private_key_password=args.password
    )
    utils.print_info(f"Clé {args.algorithm}, signature {args.digest}")
    result = toolkit.generate_csr(csr_config, show_progress=True)

    out_dir = Path(args.out_dir)
    name = _entity_name(args.cn)
    key_path = out_dir / f"{name}.key"
    pub_path = out_dir / f"{name}.pub"
    csr_path = out_dir / f"{name}.csr"

    _write_file(key_path, result.private_key_pem.encode(), config.PRIVATE_KEY_PERMISSIONS)
    _write_file(pub_path, result.public_key_pem.encode(), config.PUBLIC_FILE_PERMISSIONS)
    _write_file(csr_path, result.csr_pem.encode(), config.PUBLIC_FILE_PERMISSIONS)

    if not args.password:
        utils.print_warning("Clé privée NON chiffrée (pas de mot de passe)")
    utils.print_success(f"Clé privée: {key_path}")
    utils.print_success(f"Clé publique: {pub_path}")
    utils.print_success(f"CSR: {csr_path}")

    decoded = toolkit.decode_csr(result.csr_pem)
    if decoded is not None:
        utils.display_csr_info(decoded)
    return 0


def cmd_decode_csr(args: argparse.Namespace) -> int:
    decoded = toolkit.decode_csr(Path(args.file).read_bytes())
    if decoded is None:
        utils.print_error(f"CSR illisible: {args.file}")
        return 1
    utils.display_csr_info(decoded)
    return 0


def cmd_decode_cert(args: argparse.Namespace) -> int:
    cert = toolkit.decode_cert(Path(args.file).read_bytes())
    if cert is None:
        utils.print_error(f"Certificat illisible: {args.file}")
        return 1
    utils.display_cert_info(cert)
    return 0


def cmd_pfx(args: argparse.Namespace) -> int:
    utils.print_header(f"{config.CLI_SYMBOLS['pfx']} Création de l'archive PKCS#12")

    archive = toolkit.generate_pfx(
        Path(args.key).read_bytes(),
        Path(args.cert).read_bytes(),
        args.password,
        ca_certificates_pem=Path(args.ca).read_bytes() if args.ca else None,
        friendly_name=args.name,
        key_password=args.key_password,
        legacy=args.legacy
    )

    out_path = Path(args.out)
    _write_file(out_path, archive, config.PRIVATE_KEY_PERMISSIONS)
    utils.print_success(f"Archive PKCS#12 sauvegardée: {out_path} ({len(archive)} octets)")
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    matched = toolkit.match_key_cert(
        Path(args.key).read_bytes(),
        Path(args.cert).read_bytes(),
        args.key_password
    )
    if matched:
        utils.print_success("La clé privée correspond au certificat")
        return 0
    utils.print_error("La clé privée NE correspond PAS au certificat")
    return 1


# ============================================
# 🚀 POINT D'ENTRÉE
# ============================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="certkit",
        description="Outils PKI en libre-service: CSR, décodage, PKCS#12, correspondance clé/certificat."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Logs détaillés (DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_csr = sub.add_parser("csr", help="Générer une paire de clés et un CSR")
    p_csr.add_argument("--cn", required=True, help="Common Name")
    p_csr.add_argument("--org", default="", help="Organization Name")
    p_csr.add_argument("--ou", default=None, help="Organizational Unit (optionnel)")
    p_csr.add_argument("--city", default="", help="Locality")
    p_csr.add_argument("--state", default="", help="State or Province")
    p_csr.add_argument("--country", default="", help="Code pays sur 2 lettres")
    p_csr.add_argument("--san", action="append", help="Subject Alternative Name (répétable)")
    p_csr.add_argument("--algorithm", default="RSA", choices=["RSA", "EC"], help="Type de clé")
    p_csr.add_argument("--key-size", type=int, default=None, help="Taille clé RSA (bits) ou courbe EC (256/384/521)")
    p_csr.add_argument("--curve", default=None, help="Courbe EC (secp256r1, P-384...)")
    p_csr.add_argument("--digest", default=config.DEFAULT_HASH_ALGORITHM,
                       choices=config.SIGNATURE_ALGORITHMS, help="Hachage de signature")
    p_csr.add_argument("--password", default=None, help="Mot de passe pour chiffrer la clé privée (optionnel)")
    p_csr.add_argument("--out-dir", default=".", help="Répertoire de sortie")
    p_csr.set_defaults(func=cmd_csr)

    p_dcsr = sub.add_parser("decode-csr", help="Décoder un CSR")
    p_dcsr.add_argument("file", help="Fichier CSR (PEM ou DER)")
    p_dcsr.set_defaults(func=cmd_decode_csr)

    p_dcert = sub.add_parser("decode-cert", help="Décoder un certificat")
    p_dcert.add_argument("file", help="Fichier certificat (PEM ou DER)")
    p_dcert.set_defaults(func=cmd_decode_cert)

    p_pfx = sub.add_parser("pfx", help="Créer une archive PKCS#12")
    p_pfx.add_argument("--key", required=True, help="Clé privée PEM")
    p_pfx.add_argument("--cert", required=True, help="Certificat PEM")
    p_pfx.add_argument("--ca", default=None, help="Bundle PEM de la chaîne (optionnel)")
    p_pfx.add_argument("--password", required=True, help="Mot de passe de l'archive")
    p_pfx.add_argument("--key-password", default=None, help="Mot de passe de la clé privée")
    p_pfx.add_argument("--name", default=None, help="Nom convivial")
    p_pfx.add_argument("--legacy", action="store_true", help="Chiffrement 3DES pour anciens lecteurs")
    p_pfx.add_argument("--out", required=True, help="Fichier .pfx de sortie")
    p_pfx.set_defaults(func=cmd_pfx)

    p_match = sub.add_parser("match", help="Vérifier qu'une clé correspond à un certificat")
    p_match.add_argument("--key", required=True, help="Clé privée PEM")
    p_match.add_argument("--cert", required=True, help="Certificat PEM")
    p_match.add_argument("--key-password", default=None, help="Mot de passe de la clé privée")
    p_match.set_defaults(func=cmd_match)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Point d'entrée principal; retourne le code de sortie"""
    args = build_parser().parse_args(argv)
    utils.setup_logging("DEBUG" if args.verbose else None)

    try:
        return args.func(args)
    except CertKitError as e:
        utils.print_error(str(e))
        return 2
    except OSError as e:
        utils.print_error(f"Erreur de fichier: {e}")
        return 2
    except KeyboardInterrupt:
        utils.print_warning("Interruption détectée")
        return 130


if __name__ == "__main__":
    sys.exit(main())
