"""One interactive lab: dataset, split settings, layer list, trainer and results.

This is the surface an interface layer talks to. It keeps the trained model
only while the current configuration is unchanged; changing the split, seed
or reapplying data releases it.
"""

import logging
from typing import AsyncIterator

from data.variants import LoadedDataset, load_variant
from models.common import Config, SplitPercentages
from models.errors import InvalidConfiguration
from models.layers import LayerStack, model_hints
from models.results import DecisionGrid, EvaluationResult, MetricsSnapshot, TrainedModel
from utils.common import load_data
from utils.decision_boundary import rasterize
from utils.evaluation import evaluate
from utils.partition import Partition, adjust_train, adjust_val, partition_samples, split_proportions
from utils.trainer import Trainer

logger = logging.getLogger(__name__)


class Lab:
    def __init__(self, cfg: Config, dataset: LoadedDataset | None = None):
        self.cfg = cfg
        if dataset is None:
            records = load_data(cfg.dataset_path) if cfg.dataset_path else None
            dataset = load_variant(cfg.dataset, records)
        self.dataset = dataset
        self.seed = cfg.seed
        self.splits = cfg.splits
        self.epochs = cfg.epochs
        self.layers = LayerStack(cfg.layers)
        self.partition: Partition | None = None
        self.trainer = Trainer(
            class_order=dataset.variant.class_order,
            learning_rate=cfg.learning_rate or dataset.variant.learning_rate,
            batch_size=cfg.batch_size,
            seed=cfg.seed,
        )
        self.evaluation: EvaluationResult | None = None
        self.decision_grid: DecisionGrid | None = None

    @property
    def trained(self) -> TrainedModel | None:
        return self.trainer.trained

    @property
    def history(self) -> list[MetricsSnapshot]:
        return self.trainer.history

    def set_train_split(self, value: float) -> SplitPercentages:
        self._reconfigure()
        self.splits = adjust_train(self.splits, value)
        return self.splits

    def set_val_split(self, value: float) -> SplitPercentages:
        self._reconfigure()
        self.splits = adjust_val(self.splits, value)
        return self.splits

    def set_seed(self, seed: int):
        self._reconfigure()
        self.seed = seed

    def split_proportions(self) -> list[dict]:
        return split_proportions(self.splits)

    def hints(self) -> list[str]:
        return model_hints(self.layers)

    def apply_data(self) -> Partition:
        """Partition the dataset with the current seed and splits, dropping old results."""
        self.reset()
        self.partition = partition_samples(self.dataset.samples, self.seed, self.splits)
        logger.info("Applied %s data split %s", self.dataset.variant.name, self.partition.counts())
        return self.partition

    def reset(self):
        """Release the trained model and all derived results."""
        self.trainer.reset()
        self.evaluation = None
        self.decision_grid = None

    def train(self) -> AsyncIterator[MetricsSnapshot]:
        """Start a run over the current partition; iterate the result for per-epoch metrics."""
        if self.partition is None:
            raise InvalidConfiguration("Apply a data split before training")
        stream = self.trainer.start(self.partition, self.layers.snapshot(), self.epochs, seed=self.seed)
        self.evaluation = None
        self.decision_grid = None
        return stream

    def evaluate(self) -> EvaluationResult:
        trained = self._require_trained()
        self.evaluation = evaluate(trained, self.partition.test, self.seed, self.cfg.preview_count)
        return self.evaluation

    def rasterize(self) -> DecisionGrid:
        trained = self._require_trained()
        inverse = self.dataset.plane_inverse(self.cfg.neighbor_count)
        self.decision_grid = rasterize(trained, inverse, self.dataset.samples, self.cfg.grid_size)
        return self.decision_grid

    async def run(self) -> tuple[EvaluationResult, DecisionGrid] | None:
        """Train to completion, then evaluate and rasterize; None when cancelled."""
        async for _ in self.train():
            pass
        if self.trained is None:
            return None
        return self.evaluate(), self.rasterize()

    def _reconfigure(self):
        # the old partition and model no longer match the settings; apply_data must run again
        self.reset()
        self.partition = None

    def _require_trained(self) -> TrainedModel:
        if self.trainer.trained is None:
            raise InvalidConfiguration("No completed training run; train the network first")
        return self.trainer.trained
