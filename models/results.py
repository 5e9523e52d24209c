"""Result containers produced by training, evaluation and rasterization."""

from dataclasses import dataclass, field

import numpy as np
from torch.nn import Sequential

from models.common import Sample


@dataclass(frozen=True)
class FeatureStats:
    """Per-feature mean and floored population standard deviation of the train split."""

    means: np.ndarray
    std: np.ndarray

    def to_dict(self) -> dict:
        return {"means": self.means.tolist(), "std": self.std.tolist()}


@dataclass(frozen=True)
class MetricsSnapshot:
    """Metrics reported once at the end of every epoch."""

    epoch: int
    loss: float
    accuracy: float
    val_loss: float | None = None
    val_accuracy: float | None = None

    def to_dict(self) -> dict:
        return {
            "epoch": self.epoch,
            "loss": self.loss,
            "accuracy": self.accuracy,
            "val_loss": self.val_loss,
            "val_accuracy": self.val_accuracy,
        }


@dataclass(frozen=True)
class TrainedModel:
    """A classifier that finished training, with the stats needed to feed it."""

    model: Sequential
    feature_stats: FeatureStats
    class_order: tuple[str, ...]


@dataclass(frozen=True)
class SamplePrediction:
    sample: Sample
    predicted: str
    correct: bool


@dataclass(frozen=True)
class EvaluationResult:
    """Test-split performance; accuracy and matrix are None when the test split is empty."""

    test_accuracy: float | None
    confusion_matrix: np.ndarray | None
    class_order: tuple[str, ...]
    sample_predictions: list[SamplePrediction] = field(default_factory=list)

    def confusion_cells(self) -> list[list[dict]] | None:
        """Matrix as rows of {actual, predicted, value} cells, ready for a table."""
        if self.confusion_matrix is None:
            return None
        return [
            [
                {"actual": self.class_order[actual], "predicted": self.class_order[predicted], "value": int(value)}
                for predicted, value in enumerate(row)
            ]
            for actual, row in enumerate(self.confusion_matrix)
        ]


@dataclass(frozen=True)
class DecisionGrid:
    """Predicted class index per cell, indexed grid[xi][yi] over the bounding box."""

    grid: np.ndarray
    min_x: float
    max_x: float
    min_y: float
    max_y: float
    class_order: tuple[str, ...]

    def labels(self) -> list[list[str]]:
        return [[self.class_order[idx] for idx in row] for row in self.grid.tolist()]
