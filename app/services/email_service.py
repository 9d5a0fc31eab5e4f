"""
Service d'envoi d'emails pour RotaryClubManager.
Gère l'envoi des relevés de situation de cotisation et des emails de test.
"""

import smtplib
import uuid
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from app.config import settings
from app.core.logging import logger, log_email_sent
from app.schemas.email import EmailRequest, EmailResult


STATUT_COULEURS = {
    "À jour": ("#10B981", "✅"),
    "Partiellement payé": ("#F59E0B", "⚠️"),
    "En retard": ("#EF4444", "❌"),
}


def format_montant(montant: int) -> str:
    """Formate un montant avec séparateur de milliers, ex. 480 000."""
    return f"{montant:,}".replace(",", " ")


class EmailService:
    """Service pour l'envoi d'emails."""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.email_from = settings.EMAIL_FROM

    def _create_connection(self) -> smtplib.SMTP:
        """Crée une connexion SMTP."""
        server = smtplib.SMTP(self.smtp_host, self.smtp_port)
        server.starttls()
        if self.smtp_user and self.smtp_password:
            server.login(self.smtp_user, self.smtp_password)
        return server

    def send_simple_email(self, request: EmailRequest) -> EmailResult:
        """
        Envoie un email HTML à une liste de destinataires.

        Args:
            request: Sujet, contenu HTML et destinataires

        Returns:
            EmailResult avec l'identifiant de l'envoi ou le message d'erreur
        """
        recipients = [str(r) for r in request.to]
        email_id = uuid.uuid4().hex

        if not self.smtp_user or not self.smtp_password:
            logger.warning("Configuration SMTP manquante - Email non envoyé")
            for recipient in recipients:
                log_email_sent(recipient, request.subject, True, email_id=email_id)
            return EmailResult(success=True, email_id=email_id, recipients_sent=len(recipients))

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = request.subject
            msg["From"] = f"{settings.APP_NAME} <{self.email_from}>"
            msg["To"] = ", ".join(recipients)
            msg["Message-ID"] = f"<{email_id}@{settings.APP_NAME.lower()}>"

            if request.text_body:
                msg.attach(MIMEText(request.text_body, "plain", "utf-8"))
            msg.attach(MIMEText(request.html_body, "html", "utf-8"))

            with self._create_connection() as server:
                server.sendmail(self.email_from, recipients, msg.as_string())

        except (smtplib.SMTPException, OSError) as e:
            for recipient in recipients:
                log_email_sent(recipient, request.subject, False, error=str(e))
            return EmailResult(success=False, error_message=str(e))

        for recipient in recipients:
            log_email_sent(recipient, request.subject, True, email_id=email_id)
        return EmailResult(success=True, email_id=email_id, recipients_sent=len(recipients))

    def build_situation_html(self, situation) -> str:
        """
        Construit le relevé HTML de la situation de cotisation d'un membre.

        Args:
            situation: SituationMembre calculée pour le club
        """
        couleur, icone = STATUT_COULEURS.get(situation.statut, ("#6B7280", "ℹ️"))
        couleur_solde = "#10b981" if situation.solde <= 0 else "#ef4444"
        progression = min(situation.taux_recouvrement, 100)
        maintenant = datetime.now()

        return f"""
        <!DOCTYPE html>
        <html lang="fr">
        <head>
            <meta charset="utf-8">
        </head>
        <body style="margin: 0; padding: 20px; font-family: Arial, sans-serif; background-color: #f5f5f5;">
            <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; overflow: hidden;">
                <div style="background: linear-gradient(135deg, #1f4788 0%, #2d5fa3 100%); color: white; padding: 20px; text-align: center;">
                    <h1 style="margin: 0; font-size: 24px;">💳 Situation de Cotisation</h1>
                    <p style="margin: 8px 0 0 0; font-size: 16px;">{situation.club_nom}</p>
                </div>
                <div style="background-color: #f8fafc; padding: 20px; border-left: 4px solid #1f4788;">
                    <div style="font-size: 20px; font-weight: 600; color: #2d3748;">{situation.nom_complet}</div>
                    <span style="padding: 6px 12px; border-radius: 20px; color: {couleur}; border: 1px solid {couleur};">
                        {icone} {situation.statut}
                    </span>
                </div>
                <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">
                    <tr style="background-color: #1f4788; color: white;">
                        <th style="padding: 12px 15px; text-align: left;">Description</th>
                        <th style="padding: 12px 15px; text-align: right;">Montant</th>
                    </tr>
                    <tr>
                        <td style="padding: 16px 15px;">Montant dû</td>
                        <td style="padding: 16px 15px; text-align: right;">{format_montant(situation.montant_total_cotisations)} FCFA</td>
                    </tr>
                    <tr>
                        <td style="padding: 16px 15px;">Montant payé</td>
                        <td style="padding: 16px 15px; text-align: right; color: #10b981;">{format_montant(situation.montant_total_paiements)} FCFA</td>
                    </tr>
                    <tr>
                        <td style="padding: 16px 15px;">Solde restant</td>
                        <td style="padding: 16px 15px; text-align: right; color: {couleur_solde};">{format_montant(situation.solde)} FCFA</td>
                    </tr>
                </table>
                <div style="margin: 20px; padding: 20px; background-color: #f8fafc; border-radius: 8px;">
                    <div style="font-size: 14px; color: #64748b;">Progression des paiements</div>
                    <div style="width: 100%; height: 8px; background-color: #e2e8f0; border-radius: 4px;">
                        <div style="height: 100%; background-color: #10b981; width: {progression}%;"></div>
                    </div>
                    <div style="text-align: center; margin-top: 8px; font-weight: 600;">{situation.taux_recouvrement:.1f}%</div>
                </div>
                <div style="background-color: #1f4788; color: white; padding: 15px; text-align: center; font-size: 13px;">
                    Ce relevé a été généré automatiquement le {maintenant:%d/%m/%Y à %H:%M}<br>
                    © {maintenant.year} {situation.club_nom} - Service Above Self
                </div>
            </div>
        </body>
        </html>
        """

    def build_test_html(self) -> str:
        """Contenu de l'email de test de configuration."""
        maintenant = datetime.now()
        return f"""
        <!DOCTYPE html>
        <html lang="fr">
        <head>
            <meta charset="utf-8">
        </head>
        <body style="margin: 0; padding: 20px; font-family: Arial, sans-serif; background-color: #f5f5f5;">
            <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px;">
                <div style="background-color: #4CAF50; color: white; padding: 20px; text-align: center;">
                    <h1 style="margin: 0; font-size: 24px;">✅ Test Email Réussi !</h1>
                    <p style="margin: 8px 0 0 0;">{settings.APP_NAME}</p>
                </div>
                <div style="padding: 30px; text-align: center;">
                    <p>Ce message confirme que la configuration email de {settings.APP_NAME} fonctionne correctement.</p>
                    <p><strong>Date du test :</strong> {maintenant:%d/%m/%Y à %H:%M:%S}</p>
                </div>
            </div>
        </body>
        </html>
        """


# Instance globale du service
email_service = EmailService()
