"""
Lecture des fichiers Excel d'invités de gala.
Seule la colonne A de la première feuille est lue : un nom complet par ligne.
"""

import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Iterable, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.config import settings
from app.core.logging import logger


EXTENSIONS_ACCEPTEES = (".xlsx",)


@dataclass
class AnalyseImport:
    """Résultat de l'analyse d'un fichier avant insertion."""
    noms_a_creer: List[str] = field(default_factory=list)
    erreurs: List[str] = field(default_factory=list)
    nombre_erreurs: int = 0
    nombre_doublons: int = 0

    @property
    def nombre_lignes_traitees(self) -> int:
        return len(self.noms_a_creer)


def extension_acceptee(filename: str) -> bool:
    return bool(filename) and filename.lower().endswith(EXTENSIONS_ACCEPTEES)


def lire_colonne_a(contenu: bytes) -> Iterable[tuple]:
    """
    Retourne les couples (numéro de ligne, valeur) de la colonne A.

    Raises:
        ValueError: si le fichier n'est pas un classeur Excel lisible
    """
    try:
        wb = load_workbook(BytesIO(contenu), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ValueError(f"Fichier Excel illisible: {e}") from e

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            raise ValueError("Le fichier Excel ne contient aucune feuille de calcul")
        return [
            (numero, row[0])
            for numero, row in enumerate(ws.iter_rows(min_col=1, max_col=1, values_only=True), start=1)
            if row
        ]
    finally:
        wb.close()


def analyser_invites(contenu: bytes, noms_existants: Iterable[str]) -> AnalyseImport:
    """
    Analyse la colonne A : cellules vides ignorées, valeurs nettoyées,
    noms trop longs en erreur, doublons (base ou fichier) comptés à part.

    Args:
        contenu: Octets du fichier .xlsx
        noms_existants: Noms des invités déjà enregistrés pour le gala
    """
    longueur_max = settings.GALA_INVITES_IMPORT_MAX_NAME
    deja_vus = {n.lower() for n in noms_existants}
    analyse = AnalyseImport()

    for numero, valeur in lire_colonne_a(contenu):
        if valeur is None:
            continue
        nom = str(valeur).strip()
        if not nom:
            continue

        if len(nom) > longueur_max:
            analyse.erreurs.append(f"Ligne {numero}: Le nom '{nom}' dépasse {longueur_max} caractères")
            analyse.nombre_erreurs += 1
            continue

        if nom.lower() in deja_vus:
            analyse.erreurs.append(
                f"Ligne {numero}: L'invité '{nom}' existe déjà ou est en doublon dans le fichier"
            )
            analyse.nombre_doublons += 1
            continue

        deja_vus.add(nom.lower())
        analyse.noms_a_creer.append(nom)

    logger.debug(
        f"Analyse import: {analyse.nombre_lignes_traitees} nom(s) valide(s), "
        f"{analyse.nombre_erreurs} erreur(s), {analyse.nombre_doublons} doublon(s)"
    )
    return analyse
