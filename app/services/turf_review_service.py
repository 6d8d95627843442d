"""
Turf Review Service
Review CRUD and rating aggregation for turfs
"""

import json
import logging
import uuid
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from fastapi import HTTPException, status
from app.database import database, in_clause
from app.schemas.review import ReviewFilterOptions, UpdateReviewRequest

logger = logging.getLogger(__name__)


def summarize_ratings(rows: Iterable[Tuple[int, int]]) -> Tuple[float, Dict[int, int]]:
    """
    Average rating and distribution from (rating, count) pairs.

    >>> summarize_ratings([(5, 2), (3, 1)])
    (4.333333333333333, {5: 2, 3: 1})
    """
    distribution: Dict[int, int] = {}
    for rating, count in rows:
        distribution[int(rating)] = distribution.get(int(rating), 0) + int(count)

    total = sum(distribution.values())
    if not total:
        return 0, distribution
    return sum(r * c for r, c in distribution.items()) / total, distribution


class TurfReviewService:
    """Service for turf review operations"""

    @staticmethod
    def _serialize(row) -> dict:
        review = dict(row)
        review["images"] = json.loads(review.get("images") or "[]")
        return review

    @staticmethod
    async def _get_row(review_id: str):
        row = await database.fetch_one(
            "SELECT * FROM turf_reviews WHERE id = :id",
            {"id": review_id}
        )
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Review not found"
            )
        return row

    @staticmethod
    async def _user_summaries(user_ids: List[str]) -> Dict[str, dict]:
        if not user_ids:
            return {}
        clause, params = in_clause("user", list(dict.fromkeys(user_ids)))
        rows = await database.fetch_all(
            f"SELECT id, first_name, last_name, email, is_verified FROM users WHERE id IN {clause}",
            params
        )
        return {row["id"]: dict(row) for row in rows}

    @staticmethod
    async def _turf_summaries(turf_ids: List[str]) -> Dict[str, dict]:
        if not turf_ids:
            return {}
        clause, params = in_clause("turf", list(dict.fromkeys(turf_ids)))
        rows = await database.fetch_all(
            f"SELECT id, name, organization_id, team_size FROM turfs WHERE id IN {clause}",
            params
        )
        sport_rows = await database.fetch_all(
            f"SELECT turf_id, sport FROM turf_sports WHERE turf_id IN {clause} ORDER BY sport",
            params
        )

        turfs = {row["id"]: {**dict(row), "sports": []} for row in rows}
        for row in sport_rows:
            if row["turf_id"] in turfs:
                turfs[row["turf_id"]]["sports"].append(row["sport"])
        return turfs

    @staticmethod
    async def _list_reviews(column: str, value: str, options: ReviewFilterOptions, populate: str) -> dict:
        """Shared listing for a turf's or a user's reviews"""
        conditions = [f"{column} = :value"]
        params: dict = {"value": value}
        if options.min_rating is not None:
            conditions.append("rating >= :min_rating")
            params["min_rating"] = options.min_rating
        if options.max_rating is not None:
            conditions.append("rating <= :max_rating")
            params["max_rating"] = options.max_rating
        where = " AND ".join(conditions)

        # sort_by is whitelisted by the route layer
        sort_column = options.sort_by if options.sort_by in ("created_at", "updated_at", "rating") else "created_at"
        direction = "ASC" if options.sort_order == "asc" else "DESC"

        rows = await database.fetch_all(
            f"""
            SELECT * FROM turf_reviews WHERE {where}
            ORDER BY {sort_column} {direction}, id {direction}
            LIMIT :limit OFFSET :skip
            """,
            {**params, "limit": options.limit, "skip": options.skip}
        )
        stats = await database.fetch_all(
            f"SELECT rating, COUNT(*) AS count FROM turf_reviews WHERE {where} GROUP BY rating",
            params
        )

        average, distribution = summarize_ratings((s["rating"], s["count"]) for s in stats)
        reviews = [TurfReviewService._serialize(r) for r in rows]

        if populate == "user":
            users = await TurfReviewService._user_summaries([r["user_id"] for r in reviews])
            for review in reviews:
                review["user"] = users.get(review["user_id"])
        else:
            turfs = await TurfReviewService._turf_summaries([r["turf_id"] for r in reviews])
            for review in reviews:
                review["turf"] = turfs.get(review["turf_id"])

        return {
            "reviews": reviews,
            "total": sum(distribution.values()),
            "average_rating": average,
            "rating_distribution": distribution,
        }

    @staticmethod
    async def create_review(
        turf_id: str,
        user_id: str,
        rating: int,
        review: Optional[str] = None,
        images: Optional[List[str]] = None
    ) -> dict:
        """Create the single review a user may leave on a turf"""
        review_id = str(uuid.uuid4())
        now = datetime.utcnow()

        async with database.transaction():
            user = await database.fetch_one("SELECT id FROM users WHERE id = :id", {"id": user_id})
            if not user:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found"
                )

            turf = await database.fetch_one("SELECT id FROM turfs WHERE id = :id", {"id": turf_id})
            if not turf:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Turf not found"
                )

            # uq_turf_reviews_turf_user decides between concurrent requests
            await database.execute(
                """
                INSERT INTO turf_reviews (id, turf_id, user_id, rating, review, images, created_at, updated_at)
                VALUES (:id, :turf_id, :user_id, :rating, :review, :images, :now, :now)
                ON CONFLICT (turf_id, user_id) DO NOTHING
                """,
                {
                    "id": review_id,
                    "turf_id": turf_id,
                    "user_id": user_id,
                    "rating": rating,
                    "review": review,
                    "images": json.dumps(images or []),
                    "now": now,
                }
            )
            stored = await database.fetch_val(
                "SELECT id FROM turf_reviews WHERE turf_id = :turf_id AND user_id = :user_id",
                {"turf_id": turf_id, "user_id": user_id}
            )
            if stored != review_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="You have already reviewed this turf"
                )

        logger.info("User %s reviewed turf %s (%d)", user_id, turf_id, rating)
        return TurfReviewService._serialize(await TurfReviewService._get_row(review_id))

    @staticmethod
    async def update_review(review_id: str, user_id: str, data: UpdateReviewRequest) -> dict:
        """Apply the supplied fields of a review owned by user_id"""
        row = await TurfReviewService._get_row(review_id)
        if row["user_id"] != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only update your own reviews"
            )

        updates = {"updated_at": datetime.utcnow()}
        if data.rating is not None:
            updates["rating"] = data.rating
        if data.review is not None:
            updates["review"] = data.review
        if data.images is not None:
            updates["images"] = json.dumps(data.images)

        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        await database.execute(
            f"UPDATE turf_reviews SET {assignments} WHERE id = :id",
            {**updates, "id": review_id}
        )
        return TurfReviewService._serialize(await TurfReviewService._get_row(review_id))

    @staticmethod
    async def delete_review(review_id: str, user_id: str) -> None:
        """
        Delete a review owned by user_id. Review images are client supplied
        links, never uploaded by this service, so nothing is released.
        """
        row = await TurfReviewService._get_row(review_id)
        if row["user_id"] != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only delete your own reviews"
            )

        await database.execute("DELETE FROM turf_reviews WHERE id = :id", {"id": review_id})

        logger.info("Deleted review %s", review_id)

    @staticmethod
    async def get_reviews_by_turf(turf_id: str, options: Optional[ReviewFilterOptions] = None) -> dict:
        """Reviews of a turf with reviewer summaries"""
        return await TurfReviewService._list_reviews(
            "turf_id", turf_id, options or ReviewFilterOptions(), populate="user"
        )

    @staticmethod
    async def get_reviews_by_user(user_id: str, options: Optional[ReviewFilterOptions] = None) -> dict:
        """Reviews written by a user with turf summaries"""
        return await TurfReviewService._list_reviews(
            "user_id", user_id, options or ReviewFilterOptions(), populate="turf"
        )

    @staticmethod
    async def get_review_by_id(review_id: str) -> dict:
        review = TurfReviewService._serialize(await TurfReviewService._get_row(review_id))
        users = await TurfReviewService._user_summaries([review["user_id"]])
        turfs = await TurfReviewService._turf_summaries([review["turf_id"]])
        review["user"] = users.get(review["user_id"])
        review["turf"] = turfs.get(review["turf_id"])
        return review

    @staticmethod
    async def get_turf_review_summary(turf_id: str) -> dict:
        """Average rating and review count, zeros when the turf has no reviews"""
        row = await database.fetch_one(
            """
            SELECT AVG(rating) AS average_rating, COUNT(*) AS review_count
            FROM turf_reviews WHERE turf_id = :turf_id
            """,
            {"turf_id": turf_id}
        )
        return {
            "average_rating": float(row["average_rating"]) if row and row["average_rating"] is not None else 0,
            "review_count": row["review_count"] if row else 0,
        }


# Create singleton instance
turf_review_service = TurfReviewService()
