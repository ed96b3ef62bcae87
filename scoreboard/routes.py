import json
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import require_subject
from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .database import get_db
from .errors import InvalidRequest, NotFound, StoreFailure
from .ranking import RankEntry, paginate, reduce_best_scores, resolve_cursor
from .store import PlayerProfile, RelationshipRepository, ScoreRepository
from .validation import validate_ranking_query, validate_submission

router = APIRouter()
logger = logging.getLogger("uvicorn")


def serialize_entry(entry: RankEntry, profiles: Dict[int, PlayerProfile]) -> dict:
    record = entry.record
    profile = profiles.get(record.user_id)
    return {
        "id": record.id,
        "score": record.score,
        "game_time": record.game_time,
        "items_collected": record.items_collected,
        "difficulty": record.difficulty,
        "stage_id": record.stage_id,
        "created_at": record.created_at,
        "user": {
            "id": record.user_id,
            "username": profile.username if profile else None,
            "profile_image_url": profile.profile_image_url if profile else None,
            "first_name": profile.first_name if profile else None,
            "last_name": profile.last_name if profile else None,
            "is_current_user": entry.is_current_user,
        },
    }


@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.post("/games/scores")
async def submit_score(
    request: Request,
    subject: str = Depends(require_subject),
    db: AsyncSession = Depends(get_db),
):
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidRequest(details=[
            {"field": "body", "code": "invalid_type", "message": "request body must be valid JSON"}
        ])

    result = validate_submission(payload)
    if not result.ok:
        logger.warning(f"Rejected score submission from {subject}: {[f.code for f in result.failures]}")
        raise InvalidRequest(details=[failure.to_dict() for failure in result.failures])

    try:
        viewer = await RelationshipRepository(db).resolve_viewer(subject)
        if viewer is None:
            raise NotFound()
        record = await ScoreRepository(db).insert(viewer.id, result.submission)
    except StoreFailure as exc:
        logger.exception(f"Failed to save score for {subject}")
        raise StoreFailure("failed to save score") from exc

    logger.info(
        f"User {viewer.id} scored {record.score} on {record.game_id}/{record.stage_id} (record {record.id})"
    )
    return {"success": True, "data": record.to_dict()}


@router.get("/games/scores")
async def get_ranking(
    game_id: Optional[str] = None,
    stage_id: Optional[str] = None,
    limit: Optional[str] = None,
    cursor: Optional[str] = None,
    subject: str = Depends(require_subject),
    db: AsyncSession = Depends(get_db),
):
    params = validate_ranking_query(
        game_id, stage_id, limit, cursor,
        default_limit=DEFAULT_PAGE_SIZE,
        max_limit=MAX_PAGE_SIZE,
    )
    if not params.ok:
        raise InvalidRequest(
            "invalid request parameters",
            details=[failure.to_dict() for failure in params.failures],
        )
    query = params.query

    scores = ScoreRepository(db)
    relationships = RelationshipRepository(db)
    try:
        viewer = await relationships.resolve_viewer(subject)
        if viewer is None:
            raise NotFound()

        excluded = await relationships.blocked_user_ids(viewer.id)
        records = await scores.scan(query.game_id, query.stage_id)
        entries = reduce_best_scores(
            records, query.game_id, query.stage_id,
            excluded=excluded,
            viewer_id=viewer.id,
        )

        after = None
        if query.cursor is not None:
            after = resolve_cursor(entries, query.cursor)
            if after is None:
                # Cursor record is no longer somebody's best; its key still marks the position
                cursor_record = await scores.get(query.cursor)
                if cursor_record is None or not cursor_record.in_partition(query.game_id, query.stage_id):
                    raise InvalidRequest("invalid request parameters", details=[
                        {"field": "cursor", "code": "invalid_cursor", "message": "unknown cursor"}
                    ])
                after = cursor_record.rank_key

        page = paginate(entries, query.limit, after=after)
        profiles = await scores.load_profiles(entry.user_id for entry in page.entries)
    except StoreFailure as exc:
        logger.exception(f"Failed to fetch ranking for {query.game_id}/{query.stage_id or '*'}")
        raise StoreFailure("failed to fetch ranking") from exc

    logger.info(
        f"Served {len(page.entries)} of {page.total_count} ranked players for "
        f"{query.game_id}/{query.stage_id or '*'} (cursor={query.cursor})"
    )
    return {
        "success": True,
        "data": [serialize_entry(entry, profiles) for entry in page.entries],
        "pagination": {
            "hasMore": page.has_more,
            "nextCursor": page.next_cursor,
            "totalCount": page.total_count,
        },
    }
