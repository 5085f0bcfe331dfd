from collections.abc import Mapping
from typing import Any

from gh_wrapped.stats.aggregator import aggregate
from gh_wrapped.stats.models import DerivedStats
from gh_wrapped.stats.models import RawContributionPayload
from gh_wrapped.stats.models import parse_payload
from gh_wrapped.stats.streaks import analyze


def derive_stats(
    payload: RawContributionPayload | Mapping[str, Any],
) -> DerivedStats:
    """Turn one raw GraphQL payload into the wrapped statistics.

    Raises:
        MalformedPayloadError: If a raw mapping fails validation.
        UserNotFoundError: If the payload has no user.
    """

    if not isinstance(payload, RawContributionPayload):
        payload = parse_payload(payload)

    aggregated = aggregate(payload)
    analysis = analyze(aggregated.contribution_calendar)
    return DerivedStats(
        **dict(aggregated),
        streak_stats=analysis.streak_stats,
        most_productive_day=analysis.most_productive_day,
        most_productive_month=analysis.most_productive_month,
    )
