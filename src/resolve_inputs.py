"""Récupère les trois entrées : argument positionnel, sinon question avec valeur par défaut."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from keygen_utils import (
    DEFAULT_ALGORITHM,
    DEFAULT_USER_IDENTIFIER,
    new_unique_identifier,
)


@dataclass
class ResolvedInputs:
    user_identifier: str
    unique_identifier: str
    algorithm: str


def ask_with_default(
    description: str,
    default: str,
    read_line: Optional[Callable[[str], str]] = None,
) -> str:
    """Pose la question, renvoie la réponse ou la valeur par défaut si la ligne est vide."""
    read_line = read_line or input
    try:
        answer = read_line(f"{description} [{default}] : ").rstrip("\r\n")
    except EOFError:
        answer = ""  # stdin fermé : même traitement qu'une ligne vide
    if answer == "":
        return default
    return answer


def _pick(
    values: Sequence[Optional[str]],
    position: int,
    description: str,
    default: Callable[[], str],
    read_line: Optional[Callable[[str], str]],
) -> str:
    if position < len(values) and values[position]:
        return values[position]
    return ask_with_default(description, default(), read_line)


def resolve_inputs(
    values: Sequence[Optional[str]] = (),
    read_line: Optional[Callable[[str], str]] = None,
) -> ResolvedInputs:
    """
    Résout, dans l'ordre, l'identifiant utilisateur, l'identifiant unique et l'algorithme.

    ``values`` contient les arguments positionnels reçus (None ou absent = non fourni).
    L'identifiant unique par défaut est tiré à chaque appel, ce qui évite les
    collisions de noms entre deux exécutions simultanées. L'algorithme n'est
    pas validé ici.
    """
    user_identifier = _pick(
        values, 0, "Identifiant utilisateur (ex: adresse e-mail)",
        lambda: DEFAULT_USER_IDENTIFIER, read_line,
    )
    unique_identifier = _pick(
        values, 1, "Identifiant unique", new_unique_identifier, read_line,
    )
    algorithm = _pick(
        values, 2, "Algorithme (ed25519 ou rsa)", lambda: DEFAULT_ALGORITHM, read_line,
    )
    return ResolvedInputs(
        user_identifier=user_identifier,
        unique_identifier=unique_identifier,
        algorithm=algorithm,
    )
