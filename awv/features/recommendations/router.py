# Recommendation Library Feature - Router

from fastapi import APIRouter, Depends, status
from typing import Optional
from awv.features.recommendations.schemas import (
    CreateRecommendationRequest,
    UpdateRecommendationRequest,
    RecommendationResponse,
    RecommendationListResponse,
)
from awv.features.recommendations.service import RecommendationService
from awv.features.auth.dependencies import get_current_user, require_roles
from awv.features.auth.models import User
from awv.shared.schemas import MessageResponse


router = APIRouter(prefix="/recommendations", tags=["Recommendations"])


@router.get("", response_model=RecommendationListResponse)
async def list_recommendations(
    domain: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
):
    """
    List library recommendations.

    - **domain**: exact health domain
    - **tag**: recommendations carrying this tag
    - **search**: matches text or condition
    """
    recommendations = await RecommendationService.list_recommendations(domain=domain, tag=tag, search=search)
    return RecommendationListResponse(
        recommendations=[RecommendationService.recommendation_to_response(r) for r in recommendations],
        total=len(recommendations),
    )


@router.post("", response_model=RecommendationResponse, status_code=status.HTTP_201_CREATED)
async def create_recommendation(
    request: CreateRecommendationRequest,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    recommendation = await RecommendationService.create_recommendation(request, current_user)
    return RecommendationService.recommendation_to_response(recommendation)


@router.put("/{recommendation_id}", response_model=RecommendationResponse)
async def update_recommendation(
    recommendation_id: str,
    request: UpdateRecommendationRequest,
    current_user: User = Depends(get_current_user),
):
    """Update a recommendation. Only admins and the creator may edit it."""
    recommendation = await RecommendationService.update_recommendation(recommendation_id, request, current_user)
    return RecommendationService.recommendation_to_response(recommendation)


@router.delete("/{recommendation_id}", response_model=MessageResponse)
async def delete_recommendation(
    recommendation_id: str,
    current_user: User = Depends(get_current_user),
):
    await RecommendationService.delete_recommendation(recommendation_id, current_user)
    return MessageResponse(message="Recommendation deleted successfully")
