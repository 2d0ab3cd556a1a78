"""Script pour générer deux clés SSH : une protégée par phrase de passe, une pour l'automatisation."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from keygen_utils import (
    ALGORITHMS,
    DEFAULT_KEYGEN,
    CollaboratorFailureError,
    GeneratedKeyPair,
    UnrecognizedAlgorithmError,
    emit_key_pairs,
    lookup_algorithm_params,
)
from resolve_inputs import resolve_inputs

POSITIONALS = ("user_identifier", "unique_identifier", "algorithm")
VALUE_OPTIONS = {"--output-dir", "--keygen"}
FLAG_OPTIONS = {"-v", "--verbose", "-h", "--help"}


def split_extra_args(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Sépare les arguments du script de ceux transmis tels quels à ssh-keygen (après « -- »)."""
    argv = list(argv)
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1:]


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Génère deux paires de clés SSH (avec phrase de passe et pour l'automatisation). "
            "Les arguments manquants sont demandés interactivement ; "
            "tout ce qui suit « -- » est transmis à ssh-keygen."
        ),
    )
    parser.add_argument(
        "user_identifier",
        nargs="?",
        help="Identifiant utilisateur, en général une adresse e-mail.",
    )
    parser.add_argument(
        "unique_identifier",
        nargs="?",
        help="Identifiant unique (défaut : 32 caractères hexadécimaux aléatoires).",
    )
    parser.add_argument(
        "algorithm",
        nargs="?",
        help=f"Algorithme : {', '.join(ALGORITHMS)} (défaut : ed25519).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Dossier où enregistrer les clés (créé automatiquement si besoin).",
    )
    parser.add_argument(
        "--keygen",
        default=DEFAULT_KEYGEN,
        help="Programme de génération de clés à appeler (défaut : ssh-keygen).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Affiche les commandes lancées.",
    )
    options, positionals = _split_positionals(argv)
    args = parser.parse_args(options)
    if len(positionals) > len(POSITIONALS):
        parser.error(f"arguments en trop : {' '.join(positionals[len(POSITIONALS):])}")
    for name, value in zip(POSITIONALS, positionals):
        setattr(args, name, value)
    return args


def _split_positionals(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    # Seules les options du script sont interprétées : un identifiant
    # comme « -run42 » reste un argument positionnel tel quel.
    options: list[str] = []
    positionals: list[str] = []
    args = iter(argv)
    for arg in args:
        name = arg.split("=", 1)[0]
        if name not in VALUE_OPTIONS and name not in FLAG_OPTIONS:
            positionals.append(arg)
            continue
        options.append(arg)
        if name in VALUE_OPTIONS and "=" not in arg:
            value = next(args, None)
            if value is not None:
                options.append(value)
    return options, positionals


def report(key_pairs: Sequence[GeneratedKeyPair]) -> None:
    print(" Paires de clés SSH générées !")
    for pair in key_pairs:
        print(f"  . Clé privée ({pair.variant.label}) : {pair.private_path}")
        print(f"  . Clé publique ({pair.variant.label}) : {pair.public_path}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    own_args, extra_args = split_extra_args(sys.argv[1:] if argv is None else argv)
    args = parse_args(own_args)

    logging.basicConfig(
        format="%(asctime)-15s: %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    inputs = resolve_inputs(
        (args.user_identifier, args.unique_identifier, args.algorithm),
    )

    try:
        lookup_algorithm_params(inputs.algorithm)
    except UnrecognizedAlgorithmError as exc:
        raise SystemExit(str(exc)) from exc

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        key_pairs = emit_key_pairs(
            inputs.user_identifier,
            inputs.unique_identifier,
            inputs.algorithm,
            output_dir=output_dir,
            extra_args=extra_args,
            keygen=args.keygen,
        )
    except CollaboratorFailureError as exc:
        raise SystemExit(str(exc)) from exc

    report(key_pairs)


if __name__ == "__main__":
    main()
