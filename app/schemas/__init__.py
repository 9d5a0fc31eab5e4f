"""
Module des schémas Pydantic pour RotaryClubManager.
Définit les modèles de validation pour les requêtes et réponses API.
"""

from .common import ApiResponse, MessageResponse
from .user import (
    UserBase,
    RegisterRequest,
    RegisterAdminRequest,
    LoginRequest,
    RefreshTokenRequest,
    UserResponse,
    UserClubInfo,
    UserWithClubsResponse,
    ClubMemberResponse,
    AuthResponse,
)
from .club import (
    ClubCreate,
    ClubUpdate,
    ClubResponse,
    MandatCreate,
    MandatResponse,
    TypeReunionCreate,
    TypeReunionResponse,
    CommissionCreate,
    CommissionUpdate,
    CommissionResponse,
    PosteComiteCreate,
    PosteComiteResponse,
)
from .cotisation import (
    CotisationCreate,
    CotisationUpdate,
    CotisationResponse,
    BulkCotisationRequest,
    BulkCotisationResult,
    PaiementCotisationCreate,
    PaiementCotisationUpdate,
    PaiementCotisationResponse,
    SituationMembre,
)
from .email import EmailRequest, EmailResult
from .gala import (
    GalaCreate,
    GalaUpdate,
    GalaResponse,
    GalaDetailResponse,
    GalaInviteCreate,
    GalaInviteResponse,
    GalaVenteCreate,
    GalaVenteResponse,
    TirageResult,
)
from .reunion import (
    ReunionCreate,
    ReunionCompleteCreate,
    ReunionCompleteUpdate,
    ReunionResponse,
    ReunionDetailResponse,
    CompteRenduRequest,
    InviteReunionCreate,
    InviteReunionResponse,
)
from .commission import (
    AffecterMembreCommissionRequest,
    MembreCommissionResponse,
    NommerMembreComiteRequest,
    NommerMembreCommissionRequest,
    DemissionRequest,
)
from .budget import (
    RubriqueBudgetCreate,
    RubriqueBudgetUpdate,
    RubriqueBudgetResponse,
    RealisationCreate,
    RealisationUpdate,
    RealisationResponse,
)

__all__ = [
    "ApiResponse",
    "MessageResponse",
    # User
    "UserBase",
    "RegisterRequest",
    "RegisterAdminRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "UserResponse",
    "UserClubInfo",
    "UserWithClubsResponse",
    "ClubMemberResponse",
    "AuthResponse",
    # Club
    "ClubCreate",
    "ClubUpdate",
    "ClubResponse",
    "MandatCreate",
    "MandatResponse",
    "TypeReunionCreate",
    "TypeReunionResponse",
    "CommissionCreate",
    "CommissionUpdate",
    "CommissionResponse",
    "PosteComiteCreate",
    "PosteComiteResponse",
    # Cotisation
    "CotisationCreate",
    "CotisationUpdate",
    "CotisationResponse",
    "BulkCotisationRequest",
    "BulkCotisationResult",
    "PaiementCotisationCreate",
    "PaiementCotisationUpdate",
    "PaiementCotisationResponse",
    "SituationMembre",
    # Email
    "EmailRequest",
    "EmailResult",
    # Gala
    "GalaCreate",
    "GalaUpdate",
    "GalaResponse",
    "GalaDetailResponse",
    "GalaInviteCreate",
    "GalaInviteResponse",
    "GalaVenteCreate",
    "GalaVenteResponse",
    "TirageResult",
    # Réunion
    "ReunionCreate",
    "ReunionCompleteCreate",
    "ReunionCompleteUpdate",
    "ReunionResponse",
    "ReunionDetailResponse",
    "CompteRenduRequest",
    "InviteReunionCreate",
    "InviteReunionResponse",
    # Commission
    "AffecterMembreCommissionRequest",
    "MembreCommissionResponse",
    "NommerMembreComiteRequest",
    "NommerMembreCommissionRequest",
    "DemissionRequest",
    # Budget
    "RubriqueBudgetCreate",
    "RubriqueBudgetUpdate",
    "RubriqueBudgetResponse",
    "RealisationCreate",
    "RealisationUpdate",
    "RealisationResponse",
]
