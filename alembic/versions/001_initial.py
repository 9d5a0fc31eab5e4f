"""Migration initiale - Création des tables RotaryClubManager

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Table users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('token_version', sa.Integer(), server_default='0', nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone_number', sa.String(length=20), nullable=True),
        sa.Column('numero_membre', sa.String(length=50), nullable=True),
        sa.Column('date_anniversaire', sa.Date(), nullable=True),
        sa.Column('profile_picture_url', sa.String(length=500), nullable=True),
        sa.Column('role', sa.String(length=20), server_default='membre', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('joined_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('idx_user_email_active', 'users', ['email', 'is_active'])
    op.create_index('idx_user_role', 'users', ['role'])

    # Table clubs
    op.create_table(
        'clubs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('date_creation', sa.Date(), nullable=True),
        sa.Column('numero_club', sa.String(length=50), nullable=True),
        sa.Column('numero_telephone', sa.String(length=20), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('lieu_reunion', sa.String(length=200), nullable=True),
        sa.Column('parraine_par', sa.String(length=200), nullable=True),
        sa.Column('jour_reunion', sa.String(length=20), nullable=True),
        sa.Column('heure_reunion', sa.String(length=10), nullable=True),
        sa.Column('frequence', sa.String(length=50), nullable=True),
        sa.Column('adresse', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_clubs_id', 'clubs', ['id'])

    # Table user_clubs
    op.create_table(
        'user_clubs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('joined_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'club_id', name='unique_user_club'),
    )
    op.create_index('ix_user_clubs_id', 'user_clubs', ['id'])
    op.create_index('idx_user_club_club', 'user_clubs', ['club_id'])

    # Table mandats
    op.create_table(
        'mandats',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('annee', sa.Integer(), nullable=False),
        sa.Column('date_debut', sa.Date(), nullable=False),
        sa.Column('date_fin', sa.Date(), nullable=False),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column('montant_cotisation', sa.Integer(), server_default='0', nullable=False),
        sa.Column('est_actuel', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('club_id', 'annee', name='unique_mandat_annee'),
        sa.CheckConstraint('date_fin > date_debut', name='mandat_dates_valides'),
    )
    op.create_index('ix_mandats_id', 'mandats', ['id'])
    op.create_index('idx_mandat_club_actuel', 'mandats', ['club_id', 'est_actuel'])

    # Cotisations et paiements
    op.create_table(
        'cotisations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('membre_id', sa.Integer(), nullable=False),
        sa.Column('mandat_id', sa.Integer(), nullable=False),
        sa.Column('montant', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mandat_id'], ['mandats.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('membre_id', 'mandat_id', name='unique_cotisation_membre_mandat'),
        sa.CheckConstraint('montant >= 0', name='cotisation_montant_positif'),
    )
    op.create_index('ix_cotisations_id', 'cotisations', ['id'])
    op.create_index('idx_cotisation_mandat', 'cotisations', ['mandat_id'])

    op.create_table(
        'paiements_cotisation',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('membre_id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('montant', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('commentaires', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('montant > 0', name='paiement_montant_positif'),
    )
    op.create_index('ix_paiements_cotisation_id', 'paiements_cotisation', ['id'])
    op.create_index('idx_paiement_membre_club', 'paiements_cotisation', ['membre_id', 'club_id'])

    # Commissions et comité
    op.create_table(
        'commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('nom', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('role_et_responsabilite', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_commissions_id', 'commissions', ['id'])
    op.create_index('idx_commission_club', 'commissions', ['club_id'])

    op.create_table(
        'membres_commission',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('commission_id', sa.Integer(), nullable=False),
        sa.Column('membre_id', sa.Integer(), nullable=False),
        sa.Column('mandat_id', sa.Integer(), nullable=False),
        sa.Column('est_responsable', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('est_actif', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('date_nomination', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('date_demission', sa.DateTime(), nullable=True),
        sa.Column('commentaires', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['commission_id'], ['commissions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mandat_id'], ['mandats.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_membres_commission_id', 'membres_commission', ['id'])
    op.create_index('idx_membre_commission_mandat', 'membres_commission', ['commission_id', 'mandat_id'])

    op.create_table(
        'postes_comite',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('nom', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_postes_comite_id', 'postes_comite', ['id'])

    op.create_table(
        'membres_comite',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('poste_comite_id', sa.Integer(), nullable=False),
        sa.Column('membre_id', sa.Integer(), nullable=False),
        sa.Column('mandat_id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('est_actif', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('date_nomination', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('date_demission', sa.DateTime(), nullable=True),
        sa.Column('commentaires', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['poste_comite_id'], ['postes_comite.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mandat_id'], ['mandats.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_membres_comite_id', 'membres_comite', ['id'])
    op.create_index('idx_membre_comite_mandat', 'membres_comite', ['mandat_id', 'est_actif'])

    # Réunions
    op.create_table(
        'types_reunion',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('libelle', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('club_id', 'libelle', name='unique_type_reunion_club'),
    )
    op.create_index('ix_types_reunion_id', 'types_reunion', ['id'])

    op.create_table(
        'reunions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('type_reunion_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('heure', sa.Time(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['type_reunion_id'], ['types_reunion.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reunions_id', 'reunions', ['id'])
    op.create_index('idx_reunion_club_date', 'reunions', ['club_id', 'date'])

    op.create_table(
        'ordres_du_jour',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reunion_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=False),
        sa.Column('rapport', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['reunion_id'], ['reunions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ordres_du_jour_id', 'ordres_du_jour', ['id'])

    op.create_table(
        'listes_presence',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reunion_id', sa.Integer(), nullable=False),
        sa.Column('membre_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['reunion_id'], ['reunions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reunion_id', 'membre_id', name='unique_presence_reunion_membre'),
    )
    op.create_index('ix_listes_presence_id', 'listes_presence', ['id'])

    op.create_table(
        'invites_reunion',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reunion_id', sa.Integer(), nullable=False),
        sa.Column('nom', sa.String(length=100), nullable=False),
        sa.Column('prenom', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('telephone', sa.String(length=20), nullable=True),
        sa.Column('organisation', sa.String(length=200), nullable=True),
        sa.ForeignKeyConstraint(['reunion_id'], ['reunions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_invites_reunion_id', 'invites_reunion', ['id'])

    # Galas
    op.create_table(
        'galas',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('libelle', sa.String(length=200), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('lieu', sa.String(length=300), nullable=False),
        sa.Column('nombre_tables', sa.Integer(), server_default='1', nullable=False),
        sa.Column('nombre_souches_tickets', sa.Integer(), server_default='1', nullable=False),
        sa.Column('quantite_par_souche_tickets', sa.Integer(), server_default='1', nullable=False),
        sa.Column('nombre_souches_tombola', sa.Integer(), server_default='1', nullable=False),
        sa.Column('quantite_par_souche_tombola', sa.Integer(), server_default='1', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('nombre_tables >= 1 AND nombre_tables <= 100', name='gala_nombre_tables'),
    )
    op.create_index('ix_galas_id', 'galas', ['id'])
    op.create_index('idx_gala_date', 'galas', ['date'])

    op.create_table(
        'gala_invites',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('gala_id', sa.Integer(), nullable=False),
        sa.Column('nom_prenom', sa.String(length=200), nullable=False),
        sa.Column('present', sa.Boolean(), server_default=sa.false(), nullable=True),
        sa.ForeignKeyConstraint(['gala_id'], ['galas.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gala_invites_id', 'gala_invites', ['id'])

    op.create_table(
        'gala_tables',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('gala_id', sa.Integer(), nullable=False),
        sa.Column('table_libelle', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['gala_id'], ['galas.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_gala_tables_id', 'gala_tables', ['id'])

    op.create_table(
        'gala_table_affectations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('gala_table_id', sa.Integer(), nullable=False),
        sa.Column('gala_invites_id', sa.Integer(), nullable=False),
        sa.Column('date_ajout', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['gala_table_id'], ['gala_tables.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['gala_invites_id'], ['gala_invites.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('gala_invites_id', name='unique_affectation_invite'),
    )
    op.create_index('ix_gala_table_affectations_id', 'gala_table_affectations', ['id'])

    for table, contrainte in (('gala_tickets', 'gala_ticket_quantite'), ('gala_tombolas', 'gala_tombola_quantite')):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('gala_id', sa.Integer(), nullable=False),
            sa.Column('membre_id', sa.Integer(), nullable=True),
            sa.Column('quantite', sa.Integer(), nullable=False),
            sa.Column('externe', sa.String(length=250), nullable=True),
            sa.ForeignKeyConstraint(['gala_id'], ['galas.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['membre_id'], ['users.id'], ondelete='SET NULL'),
            sa.PrimaryKeyConstraint('id'),
            sa.CheckConstraint('quantite >= 1', name=contrainte),
        )
        op.create_index(f'ix_{table}_id', table, ['id'])

    # Budget
    op.create_table(
        'types_budget',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('libelle', sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('libelle'),
    )
    op.create_index('ix_types_budget_id', 'types_budget', ['id'])

    op.create_table(
        'categories_budget',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('type_budget_id', sa.Integer(), nullable=False),
        sa.Column('libelle', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['type_budget_id'], ['types_budget.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_budget_id', 'categories_budget', ['id'])

    op.create_table(
        'sous_categories_budget',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('category_budget_id', sa.Integer(), nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('libelle', sa.String(length=100), nullable=False),
        sa.ForeignKeyConstraint(['category_budget_id'], ['categories_budget.id']),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sous_categories_budget_id', 'sous_categories_budget', ['id'])

    op.create_table(
        'rubriques_budget',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('club_id', sa.Integer(), nullable=False),
        sa.Column('mandat_id', sa.Integer(), nullable=False),
        sa.Column('sous_category_budget_id', sa.Integer(), nullable=False),
        sa.Column('libelle', sa.String(length=200), nullable=False),
        sa.Column('prix_unitaire', sa.Numeric(14, 2), nullable=False),
        sa.Column('quantite', sa.Integer(), server_default='1', nullable=False),
        sa.Column('montant_realise', sa.Numeric(14, 2), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['club_id'], ['clubs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['mandat_id'], ['mandats.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sous_category_budget_id'], ['sous_categories_budget.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('mandat_id', 'sous_category_budget_id', 'libelle', name='unique_rubrique_libelle'),
        sa.CheckConstraint('quantite >= 1', name='rubrique_quantite_positive'),
    )
    op.create_index('ix_rubriques_budget_id', 'rubriques_budget', ['id'])
    op.create_index('idx_rubrique_club_mandat', 'rubriques_budget', ['club_id', 'mandat_id'])

    op.create_table(
        'rubriques_budget_realisees',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('rubrique_budget_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('montant', sa.Numeric(14, 2), nullable=False),
        sa.Column('commentaires', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['rubrique_budget_id'], ['rubriques_budget.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('montant > 0', name='realisation_montant_positif'),
    )
    op.create_index('ix_rubriques_budget_realisees_id', 'rubriques_budget_realisees', ['id'])


def downgrade() -> None:
    for table in (
        'rubriques_budget_realisees',
        'rubriques_budget',
        'sous_categories_budget',
        'categories_budget',
        'types_budget',
        'gala_tombolas',
        'gala_tickets',
        'gala_table_affectations',
        'gala_tables',
        'gala_invites',
        'galas',
        'invites_reunion',
        'listes_presence',
        'ordres_du_jour',
        'reunions',
        'types_reunion',
        'membres_comite',
        'postes_comite',
        'membres_commission',
        'commissions',
        'paiements_cotisation',
        'cotisations',
        'mandats',
        'user_clubs',
        'clubs',
        'users',
    ):
        op.drop_table(table)
