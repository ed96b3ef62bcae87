"""Per-user best-score ranking and keyset pagination."""

from dataclasses import dataclass, field
from datetime import datetime
from itertools import dropwhile, groupby, islice
from operator import attrgetter
from typing import Iterable, List, Optional, Sequence, Tuple

RankKey = Tuple[int, datetime, int]


@dataclass(frozen=True)
class ScoreRecord:
    id: int
    user_id: int
    game_id: str
    stage_id: str
    score: int
    game_time: int
    created_at: datetime
    items_collected: int = 0
    difficulty: str = "normal"
    is_deleted: bool = False

    @property
    def rank_key(self) -> RankKey:
        # id only separates records tied on both score and created_at
        return (-self.score, self.created_at, self.id)

    def in_partition(self, game_id: str, stage_id: Optional[str] = None) -> bool:
        if self.game_id != game_id:
            return False
        return stage_id is None or self.stage_id == stage_id

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "game_id": self.game_id,
            "stage_id": self.stage_id,
            "score": self.score,
            "game_time": self.game_time,
            "items_collected": self.items_collected,
            "difficulty": self.difficulty,
            "created_at": self.created_at,
            "is_deleted": self.is_deleted,
        }


@dataclass(frozen=True)
class RankEntry:
    record: ScoreRecord
    is_current_user: bool = False

    @property
    def user_id(self) -> int:
        return self.record.user_id

    @property
    def rank_key(self) -> RankKey:
        return self.record.rank_key


@dataclass
class RankingPage:
    entries: List[RankEntry] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[int] = None
    total_count: int = 0


def reduce_best_scores(
    records: Iterable[ScoreRecord],
    game_id: str,
    stage_id: Optional[str] = None,
    excluded: Iterable[int] = frozenset(),
    viewer_id: Optional[int] = None,
) -> List[RankEntry]:
    """One entry per user at their best, in ranking order.

    Drops soft-deleted and out-of-partition records even if the store
    already filtered them.
    """
    excluded = frozenset(excluded)
    qualifying = sorted(
        (r for r in records if not r.is_deleted and r.in_partition(game_id, stage_id)),
        key=attrgetter("user_id"),
    )

    best = []
    for user_id, run in groupby(qualifying, key=attrgetter("user_id")):
        if user_id in excluded:
            continue
        best.append(min(run, key=attrgetter("rank_key")))

    best.sort(key=attrgetter("rank_key"))
    return [
        RankEntry(record=record, is_current_user=viewer_id is not None and record.user_id == viewer_id)
        for record in best
    ]


def resolve_cursor(entries: Sequence[RankEntry], cursor_id: int) -> Optional[RankKey]:
    """Rank key of the entry whose record id is the cursor, if still ranked."""
    for entry in entries:
        if entry.record.id == cursor_id:
            return entry.rank_key
    return None


def paginate(entries: Sequence[RankEntry], limit: int, after: Optional[RankKey] = None) -> RankingPage:
    """Cut one page out of the fully reduced, ordered entry list.

    `after` is the rank key of the cursor record; only entries ranked
    strictly below it are considered. One extra entry is read to decide
    `has_more`.
    """
    if limit < 1:
        raise ValueError(f"limit must be positive, got {limit}")

    remaining = iter(entries)
    if after is not None:
        remaining = dropwhile(lambda entry: entry.rank_key <= after, remaining)

    window = list(islice(remaining, limit + 1))
    has_more = len(window) > limit
    items = window[:limit]

    return RankingPage(
        entries=items,
        has_more=has_more,
        next_cursor=items[-1].record.id if has_more else None,
        total_count=len(entries),
    )
