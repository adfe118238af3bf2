# Recommendation Library Feature - Service

from typing import Optional, List
from awv.features.recommendations.models import Recommendation
from awv.features.recommendations.schemas import (
    CreateRecommendationRequest,
    UpdateRecommendationRequest,
    RecommendationResponse,
)
from awv.features.auth.models import User
from awv.core.logging import logger
from awv.shared.exceptions import NotFoundException, ForbiddenException, parse_object_id
from awv.shared.schemas import regex_filter


class RecommendationService:
    """Service class for the recommendation library."""

    @staticmethod
    async def list_recommendations(
        domain: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Recommendation]:
        query = {}
        if domain:
            query["domain"] = domain
        if tag:
            query["tags"] = tag.strip().lower()
        if search and search.strip():
            query.update(regex_filter(["text", "condition"], search))
        return await Recommendation.find(query).sort(("domain", 1), ("text", 1)).to_list()

    @staticmethod
    async def get_recommendation(recommendation_id: str) -> Recommendation:
        recommendation = await Recommendation.get(parse_object_id(recommendation_id, "recommendation"))
        if not recommendation:
            raise NotFoundException("Recommendation not found")
        return recommendation

    @staticmethod
    def _check_owner(recommendation: Recommendation, current_user: User) -> None:
        if current_user.role != "admin" and recommendation.created_by != str(current_user.id):
            raise ForbiddenException("You can only modify recommendations you created")

    @staticmethod
    async def create_recommendation(request: CreateRecommendationRequest, current_user: User) -> Recommendation:
        recommendation = Recommendation(
            **request.model_dump(),
            is_custom=True,
            created_by=str(current_user.id),
        )
        await recommendation.insert()

        logger.info(f"Recommendation {recommendation.id} ({recommendation.domain}) created by {current_user.email}")
        return recommendation

    @staticmethod
    async def update_recommendation(
        recommendation_id: str,
        request: UpdateRecommendationRequest,
        current_user: User,
    ) -> Recommendation:
        recommendation = await RecommendationService.get_recommendation(recommendation_id)
        RecommendationService._check_owner(recommendation, current_user)

        for field, value in request.model_dump(exclude_unset=True).items():
            if value is None and field != "condition":
                continue
            setattr(recommendation, field, value)

        recommendation.update_timestamp()
        await recommendation.save()
        return recommendation

    @staticmethod
    async def delete_recommendation(recommendation_id: str, current_user: User) -> None:
        recommendation = await RecommendationService.get_recommendation(recommendation_id)
        RecommendationService._check_owner(recommendation, current_user)
        await recommendation.delete()
        logger.info(f"Recommendation {recommendation_id} deleted by {current_user.email}")

    @staticmethod
    def recommendation_to_response(recommendation: Recommendation) -> RecommendationResponse:
        return RecommendationResponse(
            id=str(recommendation.id),
            text=recommendation.text,
            domain=recommendation.domain,
            priority=recommendation.priority,
            condition=recommendation.condition,
            tags=recommendation.tags,
            is_custom=recommendation.is_custom,
            created_by=recommendation.created_by,
            created_at=recommendation.created_at,
            updated_at=recommendation.updated_at,
        )
