"""Fonctions utilitaires partagées pour générer les paires de clés SSH via ssh-keygen."""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from Crypto.Random import get_random_bytes


logger = logging.getLogger(__name__)

DEFAULT_USER_IDENTIFIER = "user@example.com"
DEFAULT_ALGORITHM = "ed25519"
DEFAULT_KEYGEN = "ssh-keygen"
UNIQUE_IDENTIFIER_BYTES = 16  # 32 caractères hexadécimaux
STEM_SEPARATOR = "="
PUBLIC_KEY_SUFFIX = ".pub"


class KeygenError(RuntimeError):
    """Exception de base du générateur de clés."""


class UnrecognizedAlgorithmError(KeygenError, ValueError):
    """Exception levée quand l'algorithme demandé n'est pas dans la table."""

    def __init__(self, algorithm: str) -> None:
        super().__init__(
            f"Algorithme inconnu : {algorithm!r} (valeurs acceptées : {', '.join(ALGORITHMS)})."
        )
        self.algorithm = algorithm


class CollaboratorFailureError(KeygenError):
    """Exception levée quand ssh-keygen échoue ou ne peut pas être lancé."""

    def __init__(
        self,
        variant: "KeyVariant",
        command: Sequence[str],
        returncode: Optional[int] = None,
    ) -> None:
        if returncode is None:
            detail = f"impossible de lancer {command[0]!r}"
        else:
            detail = f"code de retour {returncode}"
        super().__init__(f"La génération de la clé « {variant.label} » a échoué ({detail}).")
        self.variant = variant
        self.command = list(command)
        self.returncode = returncode


class KeyVariant(enum.Enum):
    """Les deux clés produites à chaque exécution."""

    WITH_PASSPHRASE = "passphrase"
    WITH_AUTOMATION = "automation"

    @property
    def label(self) -> str:
        return self.value

    @property
    def empty_passphrase(self) -> bool:
        """Vrai si ssh-keygen doit recevoir une phrase de passe vide explicite."""
        return self is KeyVariant.WITH_AUTOMATION


@dataclass(frozen=True)
class AlgorithmParams:
    key_type: str
    kdf_rounds: Optional[int] = None
    bit_length: Optional[int] = None

    def strength_args(self) -> list[str]:
        """Options ssh-keygen pour la force de la clé (-a ou -b)."""
        if self.kdf_rounds is not None:
            return ["-a", str(self.kdf_rounds)]
        return ["-b", str(self.bit_length)]


# Table fermée : ajouter un algorithme demande une relecture.
ALGORITHMS: dict[str, AlgorithmParams] = {
    "ed25519": AlgorithmParams(key_type="ed25519", kdf_rounds=100),
    "rsa": AlgorithmParams(key_type="rsa", bit_length=4096),
}


def lookup_algorithm_params(algorithm: str) -> AlgorithmParams:
    """Renvoie les paramètres ssh-keygen d'un algorithme, sans jamais en substituer un autre."""
    try:
        return ALGORITHMS[algorithm]
    except KeyError as exc:
        raise UnrecognizedAlgorithmError(algorithm) from exc


def new_unique_identifier() -> str:
    """Tire 16 octets aléatoires et les rend en 32 caractères hexadécimaux minuscules."""
    return get_random_bytes(UNIQUE_IDENTIFIER_BYTES).hex()


def derive_naming_stem(
    user_identifier: str,
    unique_identifier: str,
    algorithm: str,
    variant: KeyVariant,
) -> str:
    """
    Construit le nom commun d'une clé : commentaire et préfixe de fichier à la fois.

    Format : ``{utilisateur}={unique}=ssh-{algorithme}-with-{variante}``.
    Les identifiants ne sont pas échappés : s'ils contiennent « = », le nom
    devient ambigu (voir parse_naming_stem).
    """
    return STEM_SEPARATOR.join(
        (user_identifier, unique_identifier, f"ssh-{algorithm}-with-{variant.label}")
    )


@dataclass(frozen=True)
class NamingFields:
    user_identifier: str
    unique_identifier: str
    algorithm: str
    variant: KeyVariant


def parse_naming_stem(stem: str) -> NamingFields:
    """Découpe un nom de clé produit par derive_naming_stem. Lève ValueError s'il est ambigu."""
    parts = stem.split(STEM_SEPARATOR)
    if len(parts) != 3:
        raise ValueError(
            f"Nom de clé ambigu ou invalide : {stem!r} (3 champs séparés par '=' attendus)."
        )
    user_identifier, unique_identifier, label = parts
    prefix, marker, variant_label = label.rpartition("-with-")
    if not marker or not prefix.startswith("ssh-") or len(prefix) == len("ssh-"):
        raise ValueError(f"Suffixe de clé invalide : {label!r}.")
    try:
        variant = KeyVariant(variant_label)
    except ValueError as exc:
        raise ValueError(f"Variante de clé inconnue : {variant_label!r}.") from exc
    return NamingFields(
        user_identifier=user_identifier,
        unique_identifier=unique_identifier,
        algorithm=prefix[len("ssh-"):],
        variant=variant,
    )


@dataclass(frozen=True)
class GeneratedKeyPair:
    """Chemins produits par ssh-keygen pour une variante."""

    variant: KeyVariant
    private_path: Path

    @property
    def public_path(self) -> Path:
        return self.private_path.with_name(self.private_path.name + PUBLIC_KEY_SUFFIX)


def build_keygen_command(
    params: AlgorithmParams,
    stem: str,
    key_path: Path,
    variant: KeyVariant,
    extra_args: Sequence[str] = (),
    keygen: str = DEFAULT_KEYGEN,
) -> list[str]:
    """Construit la ligne de commande ssh-keygen pour une variante."""
    command = [keygen, "-t", params.key_type, *params.strength_args(), "-C", stem, "-f", str(key_path)]
    if variant.empty_passphrase:
        command += ["-N", ""]
    command += list(extra_args)
    return command


def run_keygen(command: Sequence[str], variant: KeyVariant) -> None:
    """
    Lance ssh-keygen et attend la fin.

    Les flux standard sont laissés au terminal : pour la variante avec phrase
    de passe, c'est ssh-keygen qui la demande, ce script ne la voit jamais.
    """
    logger.debug("Commande : %s", " ".join(command))
    try:
        subprocess.run(list(command), check=True)
    except subprocess.CalledProcessError as exc:
        logger.error("%s a terminé avec le code %s", command[0], exc.returncode)
        raise CollaboratorFailureError(variant, command, exc.returncode) from exc
    except OSError as exc:
        logger.error("Impossible de lancer %s : %s", command[0], exc)
        raise CollaboratorFailureError(variant, command) from exc


def emit_key_pairs(
    user_identifier: str,
    unique_identifier: str,
    algorithm: str,
    output_dir: Path = Path("."),
    extra_args: Sequence[str] = (),
    keygen: str = DEFAULT_KEYGEN,
) -> list[GeneratedKeyPair]:
    """Génère la clé avec phrase de passe puis la clé d'automatisation. S'arrête au premier échec."""
    params = lookup_algorithm_params(algorithm)
    generated: list[GeneratedKeyPair] = []
    for variant in (KeyVariant.WITH_PASSPHRASE, KeyVariant.WITH_AUTOMATION):
        stem = derive_naming_stem(user_identifier, unique_identifier, algorithm, variant)
        key_path = output_dir / stem
        command = build_keygen_command(params, stem, key_path, variant, extra_args, keygen)
        run_keygen(command, variant)
        generated.append(GeneratedKeyPair(variant=variant, private_path=key_path))
    return generated
