"""
Génération du compte-rendu Word (.docx) d'une réunion avec python-docx.
"""

from io import BytesIO
from typing import List

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from app.models.reunion import Reunion
from app.schemas.reunion import CompteRenduRequest


DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def nom_fichier_compte_rendu(reunion: Reunion) -> str:
    """Ex. compte-rendu-Réunion-statutaire-05-03-2025.docx"""
    libelle = reunion.type_reunion.libelle.replace(" ", "-")
    return f"compte-rendu-{libelle}-{reunion.date:%d-%m-%Y}.docx"


def _titre(doc, texte: str, taille: int, gras: bool = True):
    paragraph = doc.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = paragraph.add_run(texte)
    run.bold = gras
    run.font.size = Pt(taille)
    return paragraph


def _italique(doc, texte: str):
    paragraph = doc.add_paragraph()
    paragraph.add_run(texte).italic = True
    return paragraph


def _tableau_participants(doc, presences: List[str], invites: List[str]) -> None:
    """Tableau à deux colonnes : présences à gauche, invités à droite."""
    lignes = max(len(presences), len(invites))
    table = doc.add_table(rows=lignes + 1, cols=2)
    table.style = "Table Grid"

    entetes = table.rows[0].cells
    for cell, texte in zip(entetes, ("LISTE DES PRÉSENCES", "LISTE DES INVITÉS")):
        cell.text = ""
        cell.paragraphs[0].add_run(texte).bold = True

    for i in range(lignes):
        cells = table.rows[i + 1].cells
        cells[0].text = presences[i] if i < len(presences) else ""
        cells[1].text = invites[i] if i < len(invites) else ""


def generer_compte_rendu(reunion: Reunion, contenu: CompteRenduRequest) -> bytes:
    """
    Construit le document du compte-rendu.

    Args:
        reunion: Réunion (club et type chargés)
        contenu: Présences, invités, ordres du jour et divers saisis

    Returns:
        Contenu binaire du fichier .docx
    """
    doc = Document()

    _titre(doc, reunion.club.name, 14)
    _titre(doc, "COMPTE-RENDU DE RÉUNION", 16)
    _titre(
        doc,
        f"{reunion.type_reunion.libelle} du {reunion.date:%d/%m/%Y} à {reunion.heure:%H:%M}",
        12,
        gras=False,
    )
    doc.add_paragraph()

    presences = [p.nom_complet for p in contenu.presences]
    invites = [f"{i.prenom} {i.nom}".strip() for i in contenu.invites]
    if presences or invites:
        _tableau_participants(doc, presences, invites)
        doc.add_paragraph()

    doc.add_heading("DÉROULÉ", level=1)

    if contenu.ordres_du_jour:
        for ordre in contenu.ordres_du_jour:
            doc.add_heading(f"{ordre.numero}. {ordre.description}", level=2)
            paragraphes = [ligne.strip() for ligne in (ordre.contenu or "").splitlines() if ligne.strip()]
            if paragraphes:
                for ligne in paragraphes:
                    doc.add_paragraph(ligne)
            else:
                _italique(doc, "(Point non traité ou sans détail)")
    else:
        _italique(doc, "Aucun ordre du jour défini.")

    if contenu.divers and contenu.divers.strip():
        doc.add_heading("DIVERS", level=1)
        for ligne in contenu.divers.splitlines():
            if ligne.strip():
                doc.add_paragraph(ligne.strip())

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
