"""Rasterize a classifier's decision regions over the 2-D visualization plane.

The classifier consumes raw features, not plane coordinates, so every grid cell
is first mapped back to an approximate feature vector. Two mappings exist:

* `LinearInverseProjection` undoes a known PCA-after-scaling projection.
* `NeighborInterpolation` blends the features of the nearest known samples,
  weighted by inverse plane distance, when no linear mapping is known.

The resulting grid is a visualization aid only and never evaluation data.
"""

import logging
from typing import Protocol, Sequence

import numpy as np
import torch
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from models.common import Sample
from models.results import DecisionGrid, TrainedModel
from utils.mlp_training import predict
from utils.standardize import feature_matrix, standardize

logger = logging.getLogger(__name__)

GRID_SIZE = 60
NEIGHBOR_COUNT = 6
DISTANCE_EPSILON = 0.05


class PlaneInverse(Protocol):
    def reconstruct(self, points: np.ndarray) -> np.ndarray:
        """Map (m, 2) plane points to (m, n_features) approximate raw features."""


class LinearInverseProjection:
    """Inverse of `pca.transform(scaler.transform(x))` restricted to two components."""

    def __init__(self, plane_mean, components, feature_mean, feature_scale):
        self.plane_mean = np.asarray(plane_mean, dtype=np.float64)
        self.components = np.asarray(components, dtype=np.float64)
        self.feature_mean = np.asarray(feature_mean, dtype=np.float64)
        self.feature_scale = np.asarray(feature_scale, dtype=np.float64)
        if self.components.shape[0] != 2:
            raise ValueError("Expected exactly two plane components, got {}".format(self.components.shape[0]))

    @classmethod
    def from_fitted(cls, scaler: StandardScaler, pca: PCA) -> "LinearInverseProjection":
        return cls(pca.mean_, pca.components_, scaler.mean_, scaler.scale_)

    def reconstruct(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        scaled = self.plane_mean + points[:, :1] * self.components[0] + points[:, 1:2] * self.components[1]
        return scaled * self.feature_scale + self.feature_mean


class NeighborInterpolation:
    """Inverse-distance weighted average over the k nearest samples in the plane."""

    def __init__(self, samples: Sequence[Sample], k: int = NEIGHBOR_COUNT,
                 epsilon: float = DISTANCE_EPSILON, n_features: int = 4):
        self.plane = np.asarray([sample.plane for sample in samples], dtype=np.float64).reshape(-1, 2)
        self.features = feature_matrix(samples, n_features)
        self.n_features = self.features.shape[1] if len(samples) else n_features
        self.k = min(k, len(samples))
        self.epsilon = epsilon

    def reconstruct_point(self, x: float, y: float) -> np.ndarray:
        if self.k == 0:
            return np.zeros(self.n_features)

        distances = np.hypot(self.plane[:, 0] - x, self.plane[:, 1] - y)
        nearest = np.argsort(distances, kind='stable')[:self.k]
        weights = 1.0 / np.maximum(distances[nearest], self.epsilon)
        weight_sum = weights.sum()
        if not np.isfinite(weight_sum) or weight_sum <= 0:
            logger.debug("Degenerate neighbour weights at (%s, %s), using nearest sample", x, y)
            return self.features[nearest[0]].copy()
        return (weights / weight_sum) @ self.features[nearest]

    def reconstruct(self, points: np.ndarray) -> np.ndarray:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        if len(points) == 0:
            return np.empty((0, self.n_features))
        return np.stack([self.reconstruct_point(x, y) for x, y in points])


def rasterize(trained: TrainedModel, inverse: PlaneInverse, samples: Sequence[Sample],
              grid_size: int = GRID_SIZE) -> DecisionGrid:
    """Classify every cell of a grid spanning the plane bounding box of `samples`."""
    if not samples:
        return DecisionGrid(np.empty((0, 0), dtype=np.int64), 0.0, 0.0, 0.0, 0.0, trained.class_order)

    plane = np.asarray([sample.plane for sample in samples], dtype=np.float64)
    min_x, min_y = plane.min(axis=0)
    max_x, max_y = plane.max(axis=0)

    steps = np.arange(grid_size) / (grid_size - 1)
    xs = min_x + steps * (max_x - min_x)
    ys = min_y + steps * (max_y - min_y)
    grid_x, grid_y = np.meshgrid(xs, ys, indexing='ij')
    points = np.column_stack([grid_x.ravel(), grid_y.ravel()])

    features = inverse.reconstruct(points)
    inputs = standardize(features, trained.feature_stats).astype(np.float32)
    predicted = predict(trained.model, torch.from_numpy(inputs)).numpy()

    return DecisionGrid(
        grid=predicted.reshape(grid_size, grid_size),
        min_x=float(min_x),
        max_x=float(max_x),
        min_y=float(min_y),
        max_y=float(max_y),
        class_order=trained.class_order,
    )
