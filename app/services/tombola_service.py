"""
Tirage au sort des gagnants de la tombola d'un gala.
Chaque billet acheté est une chance ; un billet ne peut gagner qu'une fois.
"""

import random
from typing import List, NamedTuple, Optional, Sequence

from app.core.logging import log_tirage


class BilletGagnant(NamedTuple):
    """Billet tiré au sort."""
    position: int
    numero_ticket: int
    participation: object


def numeroter_billets(participations: Sequence) -> List[tuple]:
    """
    Déplie les participations en billets numérotés à partir de 1.

    Args:
        participations: Ventes de tombola (attribut ``quantite``)

    Returns:
        Liste de tuples (numero_ticket, participation)
    """
    billets = []
    numero = 1
    for participation in participations:
        for _ in range(participation.quantite):
            billets.append((numero, participation))
            numero += 1
    return billets


def tirer_gagnants(
    participations: Sequence,
    nombre_gagnants: int,
    rng: Optional[random.Random] = None,
    gala_id: Optional[int] = None,
) -> List[BilletGagnant]:
    """
    Tire ``nombre_gagnants`` billets distincts sans remise.

    Le nombre de gagnants est borné par le nombre de billets vendus.

    Raises:
        ValueError: si nombre_gagnants <= 0
    """
    if nombre_gagnants <= 0:
        raise ValueError("Le nombre de gagnants doit être supérieur à 0")

    rng = rng or random.SystemRandom()
    billets = numeroter_billets(participations)
    indices = rng.sample(range(len(billets)), min(nombre_gagnants, len(billets)))

    gagnants = [
        BilletGagnant(position=position, numero_ticket=billets[index][0], participation=billets[index][1])
        for position, index in enumerate(indices, start=1)
    ]

    log_tirage(gala_id, nombre_gagnants, len(billets), [g.numero_ticket for g in gagnants])
    return gagnants
