"""
Routes des tickets d'entrée de gala.
"""

from app.models.gala import GalaTicket
from app.api.v1.endpoints.gala_ventes import creer_router_ventes


router = creer_router_ventes(GalaTicket, "ticket", "total_tickets_disponibles")
