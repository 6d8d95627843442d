"""
Turf Service
Turf CRUD and filtered, geo-aware turf search
"""

import json
import logging
import math
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from fastapi import HTTPException, UploadFile, status
from app.database import database, in_clause
from app.schemas.turf import TurfData, TurfFilter
from app.services.storage_service import StorageService
from app.services.turf_review_service import turf_review_service

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0088


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points (haversine)"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(lat: float, lng: float, radius_km: float) -> Tuple[float, float, Optional[float], Optional[float]]:
    """
    Lat/lng box containing every point within radius_km of the center.
    Longitude bounds are None when the box wraps a pole or the antimeridian.
    """
    d_lat = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat, max_lat = lat - d_lat, lat + d_lat
    if min_lat <= -90 or max_lat >= 90:
        return max(min_lat, -90.0), min(max_lat, 90.0), None, None

    d_lng = math.degrees(radius_km / (EARTH_RADIUS_KM * math.cos(math.radians(lat))))
    min_lng, max_lng = lng - d_lng, lng + d_lng
    if min_lng < -180 or max_lng > 180:
        return min_lat, max_lat, None, None
    return min_lat, max_lat, min_lng, max_lng


class TurfService:
    """Service for turf operations"""

    @staticmethod
    async def _hydrate(rows) -> List[dict]:
        """Attach sports, operating hours and parsed images, keeping row order"""
        turfs = [dict(row) for row in rows]
        if not turfs:
            return []

        clause, params = in_clause("turf", [t["id"] for t in turfs])
        sport_rows = await database.fetch_all(
            f"SELECT turf_id, sport FROM turf_sports WHERE turf_id IN {clause} ORDER BY sport",
            params
        )
        hour_rows = await database.fetch_all(
            f"""
            SELECT turf_id, day, open_time, close_time FROM turf_operating_hours
            WHERE turf_id IN {clause}
            """,
            params
        )

        sports: Dict[str, List[str]] = {t["id"]: [] for t in turfs}
        for row in sport_rows:
            sports[row["turf_id"]].append(row["sport"])
        hours: Dict[str, dict] = {t["id"]: {} for t in turfs}
        for row in hour_rows:
            hours[row["turf_id"]][row["day"]] = {"open": row["open_time"], "close": row["close_time"]}

        for turf in turfs:
            turf["images"] = json.loads(turf["images"] or "[]")
            turf["sports"] = sports[turf["id"]]
            turf["operating_hours"] = hours[turf["id"]]
        return turfs

    @staticmethod
    async def _get_row(turf_id: str):
        row = await database.fetch_one("SELECT * FROM turfs WHERE id = :id", {"id": turf_id})
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Turf not found"
            )
        return row

    @staticmethod
    async def ensure_organization(organization_id: str) -> None:
        organization = await database.fetch_one(
            "SELECT id FROM organizations WHERE id = :id",
            {"id": organization_id}
        )
        if not organization:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Organization not found"
            )

    @staticmethod
    async def get_organization_id(turf_id: str) -> str:
        """Owning organization of a turf, used for permission checks"""
        return (await TurfService._get_row(turf_id))["organization_id"]

    @staticmethod
    async def _write_children(turf_id: str, data: TurfData) -> None:
        if data.sports is not None:
            await database.execute("DELETE FROM turf_sports WHERE turf_id = :id", {"id": turf_id})
            if data.sports:
                await database.execute_many(
                    "INSERT INTO turf_sports (turf_id, sport) VALUES (:turf_id, :sport)",
                    [{"turf_id": turf_id, "sport": s} for s in dict.fromkeys(data.sports)]
                )

        if data.operating_hours is not None:
            await database.execute("DELETE FROM turf_operating_hours WHERE turf_id = :id", {"id": turf_id})
            windows = data.operating_hours.root
            if windows:
                await database.execute_many(
                    """
                    INSERT INTO turf_operating_hours (turf_id, day, open_time, close_time)
                    VALUES (:turf_id, :day, :open_time, :close_time)
                    """,
                    [
                        {"turf_id": turf_id, "day": day, "open_time": w.open, "close_time": w.close}
                        for day, w in windows.items()
                    ]
                )

    @staticmethod
    async def create_turf(data: TurfData, images: Optional[List[UploadFile]] = None) -> dict:
        """Create a turf under an existing organization"""
        if not data.name or not data.organization_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name and organization are required"
            )
        if data.base_price is None or data.team_size is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="basePrice and team_size are required"
            )

        organization_id = str(data.organization_id)
        await TurfService.ensure_organization(organization_id)

        turf_id = str(uuid.uuid4())
        image_urls = await StorageService.upload_images(images, f"turfs/{turf_id}")

        now = datetime.utcnow()
        try:
            async with database.transaction():
                await database.execute(
                    """
                    INSERT INTO turfs
                    (id, organization_id, name, base_price, team_size, images, created_at, updated_at)
                    VALUES (:id, :organization_id, :name, :base_price, :team_size, :images, :now, :now)
                    """,
                    {
                        "id": turf_id,
                        "organization_id": organization_id,
                        "name": data.name,
                        "base_price": data.base_price,
                        "team_size": data.team_size,
                        "images": json.dumps(image_urls),
                        "now": now,
                    }
                )
                await TurfService._write_children(turf_id, data)
        except Exception:
            logger.exception("Failed to create turf %s", data.name)
            await StorageService.delete_images(image_urls)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create turf"
            )

        logger.info("Created turf %s in organization %s", turf_id, organization_id)
        return await TurfService.get_turf_by_id(turf_id)

    @staticmethod
    async def get_turfs(
        organization_id: Optional[str] = None,
        sport: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> dict:
        """Basic listing, newest first"""
        conditions = []
        params: dict = {}
        if organization_id:
            conditions.append("t.organization_id = :organization_id")
            params["organization_id"] = organization_id
        if sport:
            conditions.append(
                "EXISTS (SELECT 1 FROM turf_sports s WHERE s.turf_id = t.id AND s.sport = :sport)"
            )
            params["sport"] = sport.strip().lower()
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        total = await database.fetch_val(f"SELECT COUNT(*) FROM turfs t {where}", params) or 0
        rows = await database.fetch_all(
            f"""
            SELECT t.* FROM turfs t {where}
            ORDER BY t.created_at DESC, t.id
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": (page - 1) * limit}
        )

        return {
            "turfs": await TurfService._hydrate(rows),
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0,
        }

    @staticmethod
    async def get_turf_by_id(turf_id: str) -> dict:
        """Turf with its review ids and rating summary"""
        row = await TurfService._get_row(turf_id)
        turf = (await TurfService._hydrate([row]))[0]

        reviews = await database.fetch_all(
            "SELECT id FROM turf_reviews WHERE turf_id = :id ORDER BY created_at",
            {"id": turf_id}
        )
        turf["reviews"] = [r["id"] for r in reviews]
        turf["review_summary"] = await turf_review_service.get_turf_review_summary(turf_id)
        return turf

    @staticmethod
    async def update_turf(
        turf_id: str,
        data: TurfData,
        new_images: Optional[List[UploadFile]] = None
    ) -> dict:
        """
        Partially update a turf. New images replace the old ones,
        which are released once the update is stored.
        """
        row = await TurfService._get_row(turf_id)

        if data.organization_id and str(data.organization_id) != row["organization_id"]:
            await TurfService.ensure_organization(str(data.organization_id))

        uploaded = await StorageService.upload_images(new_images, f"turfs/{turf_id}")
        released = json.loads(row["images"] or "[]") if uploaded else []

        updates = {"updated_at": datetime.utcnow()}
        if data.name:
            updates["name"] = data.name
        if data.organization_id:
            updates["organization_id"] = str(data.organization_id)
        if data.base_price is not None:
            updates["base_price"] = data.base_price
        if data.team_size is not None:
            updates["team_size"] = data.team_size
        if uploaded:
            updates["images"] = json.dumps(uploaded)

        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        try:
            async with database.transaction():
                await database.execute(
                    f"UPDATE turfs SET {assignments} WHERE id = :id",
                    {**updates, "id": turf_id}
                )
                await TurfService._write_children(turf_id, data)
        except Exception:
            logger.exception("Failed to update turf %s", turf_id)
            await StorageService.delete_images(uploaded)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update turf"
            )

        await StorageService.delete_images(released)
        return await TurfService.get_turf_by_id(turf_id)

    @staticmethod
    async def delete_turf(turf_id: str) -> None:
        """Delete a turf together with its reviews, releasing the turf images first"""
        row = await TurfService._get_row(turf_id)
        await StorageService.delete_images(json.loads(row["images"] or "[]"))

        params = {"id": turf_id}
        async with database.transaction():
            await database.execute("DELETE FROM turf_reviews WHERE turf_id = :id", params)
            await database.execute("DELETE FROM turf_sports WHERE turf_id = :id", params)
            await database.execute("DELETE FROM turf_operating_hours WHERE turf_id = :id", params)
            await database.execute("DELETE FROM turfs WHERE id = :id", params)

        logger.info("Deleted turf %s", turf_id)

    @staticmethod
    def _filter_conditions(options: TurfFilter) -> Tuple[List[str], dict]:
        conditions: List[str] = []
        params: dict = {}

        if options.min_price is not None:
            conditions.append("t.base_price >= :min_price")
            params["min_price"] = options.min_price
        if options.max_price is not None:
            conditions.append("t.base_price <= :max_price")
            params["max_price"] = options.max_price
        if options.team_size is not None:
            conditions.append("t.team_size = :team_size")
            params["team_size"] = options.team_size

        if options.sports:
            clause, sport_params = in_clause("sport", options.sports)
            conditions.append(
                f"EXISTS (SELECT 1 FROM turf_sports s WHERE s.turf_id = t.id AND s.sport IN {clause})"
            )
            params.update(sport_params)

        if options.facilities:
            facilities = list(dict.fromkeys(options.facilities))
            clause, facility_params = in_clause("facility", facilities)
            conditions.append(
                f"""
                (SELECT COUNT(DISTINCT f.facility) FROM organization_facilities f
                 WHERE f.organization_id = t.organization_id AND f.facility IN {clause}) = :facility_count
                """
            )
            params.update(facility_params)
            params["facility_count"] = len(facilities)

        if options.preferred_day:
            hours = "h.turf_id = t.id AND h.day = :preferred_day"
            params["preferred_day"] = options.preferred_day
            if options.preferred_time:
                hours += " AND h.open_time <= :preferred_time AND h.close_time > :preferred_time"
                params["preferred_time"] = options.preferred_time
            conditions.append(f"EXISTS (SELECT 1 FROM turf_operating_hours h WHERE {hours})")

        return conditions, params

    @staticmethod
    async def filter_turfs(options: TurfFilter) -> dict:
        """
        Search turfs.

        Sports match any of the listed sports, facilities must all be offered by
        the owning organization. With a center point, turfs farther than
        radius_km are dropped and the rest are ordered nearest first; otherwise
        newest first.
        """
        conditions, params = TurfService._filter_conditions(options)
        offset = (options.page - 1) * options.limit

        if not options.has_location:
            where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
            total = await database.fetch_val(f"SELECT COUNT(*) FROM turfs t {where}", params) or 0
            rows = await database.fetch_all(
                f"""
                SELECT t.* FROM turfs t {where}
                ORDER BY t.created_at DESC, t.id
                LIMIT :limit OFFSET :offset
                """,
                {**params, "limit": options.limit, "offset": offset}
            )
            turfs = await TurfService._hydrate(rows)
        else:
            min_lat, max_lat, min_lng, max_lng = bounding_box(
                options.latitude, options.longitude, options.radius_km
            )
            conditions.append("o.latitude BETWEEN :min_lat AND :max_lat")
            params.update({"min_lat": min_lat, "max_lat": max_lat})
            if min_lng is not None:
                conditions.append("o.longitude BETWEEN :min_lng AND :max_lng")
                params.update({"min_lng": min_lng, "max_lng": max_lng})

            rows = await database.fetch_all(
                f"""
                SELECT t.*, o.latitude AS org_latitude, o.longitude AS org_longitude
                FROM turfs t JOIN organizations o ON o.id = t.organization_id
                WHERE {' AND '.join(conditions)}
                """,
                params
            )

            nearby = []
            for row in rows:
                d = distance_km(options.latitude, options.longitude, row["org_latitude"], row["org_longitude"])
                if d <= options.radius_km:
                    nearby.append((d, row))
            nearby.sort(key=lambda item: (item[0], item[1]["id"]))

            total = len(nearby)
            page = nearby[offset:offset + options.limit]
            turfs = await TurfService._hydrate([row for _, row in page])
            for turf, (d, _) in zip(turfs, page):
                turf.pop("org_latitude", None)
                turf.pop("org_longitude", None)
                turf["distance_km"] = round(d, 3)

        return {
            "turfs": turfs,
            "total": total,
            "page": options.page,
            "limit": options.limit,
            "pages": math.ceil(total / options.limit),
        }


# Create singleton instance
turf_service = TurfService()
