"""Parent dashboard package for babble sessions and scores."""

from babblebear.dashboard.config import DashboardConfig
from babblebear.dashboard.scoring import ScoreAggregator, compute_average, compute_score

__all__ = ["DashboardConfig", "ScoreAggregator", "compute_average", "compute_score"]
