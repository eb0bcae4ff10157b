"""Rating aggregation over user feedback.

Averages are computed on the fly from the feedback returned by the
service; nothing here is persisted. A score of 0 means the author
skipped that criterion and is left out of every mean.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from src.userfeedback.schemas import UserFeedback


@dataclass
class RatingAverage:
    """Aggregate rating for a metadata record.

    Attributes:
        rating_averages: Mean non-zero score per criterion.
        average: Mean of every non-zero score, or None when nothing was rated.
        count: Number of feedback records considered.
    """

    rating_averages: dict[str, float] = field(default_factory=dict)
    average: float | None = None
    count: int = 0


def average_of_ratings(ratings: Mapping[str, int]) -> float | None:
    """Mean of the non-zero scores in a single feedback's ratings."""
    scores = [score for score in ratings.values() if score > 0]
    if not scores:
        return None
    return round(sum(scores) / len(scores), 2)


def compute_rating_average(feedback_list: Iterable[UserFeedback]) -> RatingAverage:
    """Aggregate ratings across feedback, per criterion and overall."""
    sums: dict[str, int] = defaultdict(int)
    counts: dict[str, int] = defaultdict(int)
    total = 0
    total_scores = 0
    n_feedback = 0

    for feedback in feedback_list:
        n_feedback += 1
        for criterion, score in feedback.ratings.items():
            if score <= 0:
                continue
            sums[criterion] += score
            counts[criterion] += 1
            total += score
            total_scores += 1

    rating_averages = {
        criterion: round(sums[criterion] / counts[criterion], 2)
        for criterion in sorted(sums)
    }

    return RatingAverage(
        rating_averages=rating_averages,
        average=round(total / total_scores, 2) if total_scores else None,
        count=n_feedback,
    )
