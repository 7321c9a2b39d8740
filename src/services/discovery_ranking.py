"""Discovery ranking pipeline for nearby deals.

Ranking is a fixed, ordered list of filter stages run over the deal list:

1. distance annotation
2. preference filter (soft)
3. radius filter (hard)
4. distance sort
5. manual category filter (hard)
6. text search (hard)

A soft stage whose output would be empty is skipped, so an over-eager
preference filter never turns into an empty feed. Hard stages always apply.
The pipeline is synchronous and side-effect free; it is re-run from scratch
whenever any of its inputs change.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Sequence

from src.logging import get_logger
from src.models.deal import Deal, GeoPoint, RankedDeal, UserPreferences
from src.services.categories import matches_preferences, normalize_category
from src.services.geo import RegionRadiusPolicy, haversine_km

logger = get_logger(__name__)


class StageMode(str, Enum):
    """How a stage treats an empty result."""

    HARD = "HARD"
    SOFT = "SOFT"


@dataclass(frozen=True)
class RankingQuery:
    """All inputs of one ranking pass."""

    user_location: Optional[GeoPoint] = None
    preferences: Optional[UserPreferences] = None
    preference_filter_enabled: bool = True
    manual_categories: frozenset[str] = field(default_factory=frozenset)
    search_text: str = ""


StageFn = Callable[[list[RankedDeal], RankingQuery], list[RankedDeal]]


@dataclass(frozen=True)
class FilterStage:
    """One named step of the pipeline."""

    name: str
    mode: StageMode
    apply: StageFn

    def run(self, deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
        result = self.apply(deals, query)
        if self.mode is StageMode.SOFT and not result and deals:
            logger.debug("ranking_soft_stage_skipped", stage=self.name, count=len(deals))
            return deals
        return result


def preference_stage(deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
    """Keep deals whose category is among the user's preferred categories."""
    prefs = query.preferences
    if not query.preference_filter_enabled or prefs is None or prefs.is_empty:
        return deals
    return [d for d in deals if matches_preferences(d.deal.deal_type, prefs)]


def distance_sort_stage(deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
    """Closest first. Backend order is kept when location is unknown."""
    if query.user_location is None:
        return deals
    # Stable sort; deals without a distance go last
    return sorted(
        deals,
        key=lambda d: (d.distance_km is None, d.distance_km if d.distance_km is not None else 0.0),
    )


def category_stage(deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
    """Keep deals whose raw tag was picked manually."""
    if not query.manual_categories:
        return deals
    return [d for d in deals if d.deal.deal_type in query.manual_categories]


def search_stage(deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
    """Case-insensitive substring match over the deal's text fields."""
    if not query.search_text.strip():
        return deals
    text = query.search_text.lower()
    return [
        d
        for d in deals
        if text in d.deal.title.lower()
        or text in d.deal.description.lower()
        or text in d.deal.venue_name.lower()
        or text in d.deal.deal_type.lower()
    ]


class DiscoveryRankingService:
    """Service for ranking and filtering deals by proximity and preference."""

    def __init__(
        self,
        radius_policy: Optional[RegionRadiusPolicy] = None,
        stages: Optional[Sequence[FilterStage]] = None,
    ):
        """Initialize discovery ranking service.

        Args:
            radius_policy: Region radius lookup, defaults to the standard table
            stages: Filter stages run after distance annotation; defaults to
                ``default_stages()``
        """
        self.radius_policy = radius_policy or RegionRadiusPolicy()
        self.stages: tuple[FilterStage, ...] = tuple(stages) if stages is not None else self.default_stages()

    def default_stages(self) -> tuple[FilterStage, ...]:
        return (
            FilterStage("preference", StageMode.SOFT, preference_stage),
            FilterStage("radius", StageMode.HARD, self._radius_stage),
            FilterStage("distance_sort", StageMode.HARD, distance_sort_stage),
            FilterStage("category", StageMode.HARD, category_stage),
            FilterStage("search", StageMode.HARD, search_stage),
        )

    def annotate(self, deals: Iterable[Deal], user_location: Optional[GeoPoint]) -> list[RankedDeal]:
        """Attach distance and preference category to every deal."""
        ranked = []
        for deal in deals:
            distance_km = None
            region = deal.region
            if user_location is not None and region is not None and region.active:
                distance_km = haversine_km(user_location, region.center)
            ranked.append(
                RankedDeal(
                    deal=deal,
                    distance_km=distance_km,
                    category=normalize_category(deal.deal_type),
                )
            )
        return ranked

    def rank(
        self,
        deals: Iterable[Deal],
        user_location: Optional[GeoPoint] = None,
        preferences: Optional[UserPreferences] = None,
        preference_filter_enabled: bool = True,
        manual_categories: Iterable[str] = (),
        search_text: str = "",
    ) -> list[RankedDeal]:
        """Run the full pipeline and return the ordered feed."""
        query = RankingQuery(
            user_location=user_location,
            preferences=preferences,
            preference_filter_enabled=preference_filter_enabled,
            manual_categories=frozenset(manual_categories),
            search_text=search_text or "",
        )
        return self.run(deals, query)

    def run(self, deals: Iterable[Deal], query: RankingQuery) -> list[RankedDeal]:
        working = self.annotate(deals, query.user_location)
        for stage in self.stages:
            before = len(working)
            working = stage.run(working, query)
            logger.debug(
                "ranking_stage_applied",
                stage=stage.name,
                mode=stage.mode.value,
                before=before,
                after=len(working),
            )
        return working

    def _radius_stage(self, deals: list[RankedDeal], query: RankingQuery) -> list[RankedDeal]:
        """Drop deals outside their region's radius. No-op without location."""
        if query.user_location is None:
            return deals
        results = []
        for ranked in deals:
            if ranked.distance_km is None:
                continue
            region_name = ranked.deal.region.name if ranked.deal.region else None
            if ranked.distance_km <= self.radius_policy.radius_for(region_name):
                results.append(ranked)
        return results
