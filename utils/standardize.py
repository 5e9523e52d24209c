"""Per-feature standardization fitted on the training split only."""

from typing import Sequence

import numpy as np
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

from models.common import Sample
from models.errors import InvalidConfiguration
from models.results import FeatureStats

STD_EPSILON = 1e-6


def feature_matrix(samples: Sequence[Sample], n_features: int | None = None) -> np.ndarray:
    """Stack sample features into an (n_samples, n_features) float64 array."""
    if not samples:
        return np.empty((0, n_features or 0), dtype=np.float64)
    return np.asarray([sample.features for sample in samples], dtype=np.float64)


class FeatureStandardizer:
    """StandardScaler whose scale is floored so constant features never divide by zero."""

    def __init__(self, epsilon: float = STD_EPSILON):
        self.epsilon = epsilon
        self.scaler = StandardScaler()

    def fit(self, train_features: np.ndarray) -> "FeatureStandardizer":
        if len(train_features) == 0:
            raise InvalidConfiguration("Cannot fit feature statistics on an empty training split")
        self.scaler = StandardScaler()
        self.scaler.fit(train_features)
        # population std (ddof=0), floored
        self.scaler.scale_ = np.maximum(np.sqrt(self.scaler.var_), self.epsilon)
        return self

    @property
    def stats(self) -> FeatureStats:
        check_is_fitted(self.scaler)
        return FeatureStats(means=self.scaler.mean_.copy(), std=self.scaler.scale_.copy())

    def transform(self, features: np.ndarray) -> np.ndarray:
        check_is_fitted(self.scaler)
        if len(features) == 0:
            return np.empty((0, self.scaler.n_features_in_), dtype=np.float64)
        return self.scaler.transform(features)


def standardize(features: np.ndarray, stats: FeatureStats) -> np.ndarray:
    """Apply fitted stats outside of a scaler, e.g. to reconstructed plane points."""
    return (np.asarray(features, dtype=np.float64) - stats.means) / stats.std
