"""
Turf Review Routes
Create / update / delete reviews and rating aggregates per turf and per user
"""

import math
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.auth import get_current_user
from app.schemas.common import Envelope, MessageResponse
from app.schemas.review import (
    SORTABLE_FIELDS,
    CreateReviewRequest,
    UpdateReviewRequest,
    ReviewFilterOptions,
    ReviewResponse,
    ReviewListResponse,
)
from app.schemas.turf import ReviewSummary
from app.services.form_parser import form_parser
from app.services.turf_review_service import turf_review_service

router = APIRouter()


class ReviewListQuery:
    """Query string shared by the review list endpoints"""

    def __init__(
        self,
        min_rating: Optional[int] = Query(None, alias="minRating", ge=1, le=5),
        max_rating: Optional[int] = Query(None, alias="maxRating", ge=1, le=5),
        page: Optional[int] = Query(None, ge=1),
        limit: Optional[int] = Query(None, ge=1, le=100),
        sort_by: str = Query("createdAt", alias="sortBy"),
        sort_order: str = Query("desc", alias="sortOrder")
    ):
        if sort_by not in SORTABLE_FIELDS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="sortBy must be one of createdAt, updatedAt, rating"
            )
        if sort_order.lower() not in ("asc", "desc"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="sortOrder must be asc or desc"
            )

        self.page = page
        self.limit = limit
        options = {
            "min_rating": min_rating,
            "max_rating": max_rating,
            "sort_by": SORTABLE_FIELDS[sort_by],
            "sort_order": sort_order.lower(),
        }
        if limit is not None:
            options["limit"] = limit
            if page is not None:
                options["skip"] = (page - 1) * limit
        self.options = form_parser.build(ReviewFilterOptions, **options)

    def response(self, result: dict) -> dict:
        meta = {"total": result["total"]}
        if self.limit is not None:
            meta["page"] = self.page or 1
            meta["limit"] = self.limit
            meta["pages"] = math.ceil(result["total"] / self.limit)
        return {
            "success": True,
            "data": {
                "reviews": result["reviews"],
                "average_rating": result["average_rating"],
                "rating_distribution": result["rating_distribution"],
            },
            "meta": meta,
        }


@router.post("/", response_model=Envelope[ReviewResponse], status_code=status.HTTP_201_CREATED)
async def create_review(
    request: CreateReviewRequest,
    current_user: dict = Depends(get_current_user)
):
    """
    Review a turf (one review per user and turf)

    - **turfId**: turf being reviewed
    - **rating**: 1 to 5
    - **review**: optional text, up to 1000 characters
    """
    review = await turf_review_service.create_review(
        str(request.turf_id),
        current_user["user_id"],
        request.rating,
        request.review,
        request.images
    )
    return {"success": True, "data": review, "message": "Review created successfully"}


@router.put("/{review_id}", response_model=Envelope[ReviewResponse])
async def update_review(
    review_id: UUID,
    request: UpdateReviewRequest,
    current_user: dict = Depends(get_current_user)
):
    review = await turf_review_service.update_review(str(review_id), current_user["user_id"], request)
    return {"success": True, "data": review, "message": "Review updated successfully"}


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: UUID,
    current_user: dict = Depends(get_current_user)
):
    await turf_review_service.delete_review(str(review_id), current_user["user_id"])
    return {"success": True, "message": "Review deleted successfully"}


@router.get("/turf/{turf_id}", response_model=ReviewListResponse)
async def get_reviews_by_turf(turf_id: UUID, query: ReviewListQuery = Depends()):
    """
    Reviews of a turf with reviewer details, average rating and rating distribution

    `meta.page`, `meta.limit` and `meta.pages` are present only when `limit` is given.
    """
    result = await turf_review_service.get_reviews_by_turf(str(turf_id), query.options)
    return query.response(result)


@router.get("/user/{user_id}", response_model=ReviewListResponse)
async def get_reviews_by_user(user_id: UUID, query: ReviewListQuery = Depends()):
    result = await turf_review_service.get_reviews_by_user(str(user_id), query.options)
    return query.response(result)


@router.get("/me", response_model=ReviewListResponse)
async def get_my_reviews(
    query: ReviewListQuery = Depends(),
    current_user: dict = Depends(get_current_user)
):
    result = await turf_review_service.get_reviews_by_user(current_user["user_id"], query.options)
    return query.response(result)


@router.get("/summary/{turf_id}", response_model=Envelope[ReviewSummary])
async def get_turf_review_summary(turf_id: UUID):
    summary = await turf_review_service.get_turf_review_summary(str(turf_id))
    return {"success": True, "data": summary}


@router.get("/{review_id}", response_model=Envelope[ReviewResponse])
async def get_review(review_id: UUID):
    review = await turf_review_service.get_review_by_id(str(review_id))
    return {"success": True, "data": review}
