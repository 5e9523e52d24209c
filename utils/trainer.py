"""Owns one training run at a time and streams per-epoch metrics to the caller.

A run is started synchronously with `Trainer.start`, which validates the request
and returns an async iterator. Iterating it trains one epoch per step, yields a
`MetricsSnapshot` and hands control back to the event loop before the next
epoch. The run only claims the trainer on its first step, so a stream that is
never iterated can be dropped, and a later `start` or `reset` supersedes it.
`Trainer.cancel` is honoured at the next epoch boundary.
"""

import asyncio
import logging
import warnings
from typing import AsyncIterator, Iterable, Sequence

import numpy as np
import torch
from torch.utils.data import DataLoader

import utils.mlp_training as MLPTraining
from data.LabDataset import LabDataset, label_indices, one_hot
from model.MLP import load_model
from models.common import MAX_EPOCHS, TrainingState
from models.errors import ConcurrentRunError, EmptySplitWarning, InvalidConfiguration, TrainingFailure
from models.layers import LayerSpec
from models.results import MetricsSnapshot, TrainedModel
from utils.common import get_optimizer
from utils.partition import Partition
from utils.standardize import FeatureStandardizer, feature_matrix

logger = logging.getLogger(__name__)


class Trainer:
    """Single-owner trainer: IDLE -> RUNNING -> COMPLETED | FAILED | CANCELLED."""

    def __init__(self, class_order: Sequence[str], learning_rate: float, batch_size: int = 32, seed: int = 0):
        self.class_order = tuple(class_order)
        self.learning_rate = learning_rate
        self.batch_size = batch_size
        self.seed = seed
        self.state = TrainingState.IDLE
        self.history: list[MetricsSnapshot] = []
        self.trained: TrainedModel | None = None
        self.error: TrainingFailure | None = None
        self._cancel_requested = False
        self._pending: object | None = None

    @property
    def running(self) -> bool:
        return self.state is TrainingState.RUNNING

    def reset(self):
        """Discard history and any trained model from a finished run."""
        if self.running:
            raise ConcurrentRunError("Cannot reset while a run is in progress")
        self.state = TrainingState.IDLE
        self.history = []
        self.trained = None
        self.error = None
        self._cancel_requested = False
        self._pending = None

    def cancel(self):
        """Ask the active run to stop before its next epoch."""
        if self.running:
            self._cancel_requested = True

    def start(self, partition: Partition, layers: Iterable[LayerSpec], epochs: int,
              seed: int | None = None) -> AsyncIterator[MetricsSnapshot]:
        """Validate the request and return the epoch stream of a fresh run."""
        if self.running:
            raise ConcurrentRunError("A training run is already in progress on this trainer")
        if not 1 <= epochs <= MAX_EPOCHS:
            raise InvalidConfiguration("Epoch count must be within 1..{}, got {}".format(MAX_EPOCHS, epochs))
        if not partition.train:
            raise InvalidConfiguration("Training split is empty; adjust the split or load more samples")
        widths = {len(sample.features) for sample in partition.train + partition.val + partition.test}
        if len(widths) != 1:
            raise InvalidConfiguration("Samples disagree on feature count: {}".format(sorted(widths)))
        for split in (partition.train, partition.val, partition.test):
            label_indices(split, self.class_order)

        layers = tuple(layers)
        self.reset()
        if seed is not None:
            self.seed = seed
        self._pending = token = object()
        return self._run(token, partition, layers, epochs)

    async def fit(self, partition: Partition, layers: Iterable[LayerSpec], epochs: int,
                  seed: int | None = None) -> TrainedModel | None:
        """Drain a whole run; returns None when it was cancelled."""
        async for _ in self.start(partition, layers, epochs, seed):
            pass
        return self.trained

    async def _run(self, token: object, partition: Partition, layers: tuple[LayerSpec, ...], epochs: int):
        # the run owns the trainer from its first step
        if token is not self._pending:
            raise ConcurrentRunError("This training stream was superseded by a later start or reset")
        self._pending = None
        self.state = TrainingState.RUNNING
        logger.info("Starting run: %d epochs, %d hidden layers, splits %s", epochs, len(layers), partition.counts())
        try:
            try:
                model, optimizer, loader, stats, valid = self._prepare(partition, layers)
            except Exception as exc:
                raise self._fail("Could not build the network", exc) from exc

            for epoch in range(1, epochs + 1):
                if self._cancel_requested:
                    logger.info("Run cancelled before epoch %d", epoch)
                    self._discard(TrainingState.CANCELLED)
                    return
                try:
                    loss, accuracy = MLPTraining.train(model, loader, optimizer)
                    val_loss, val_accuracy = None, None
                    if valid is not None:
                        val_loss, val_accuracy = MLPTraining.validate(model, *valid)
                except Exception as exc:
                    raise self._fail("Training failed at epoch {}".format(epoch), exc) from exc

                snapshot = MetricsSnapshot(epoch, loss, accuracy, val_loss, val_accuracy)
                self.history.append(snapshot)
                logger.info("Epoch %d - loss %.4f acc %.4f val_loss %s val_acc %s",
                            epoch, loss, accuracy, val_loss, val_accuracy)
                yield snapshot
                await asyncio.sleep(0)

            model.eval()
            self.trained = TrainedModel(model=model, feature_stats=stats, class_order=self.class_order)
            self.state = TrainingState.COMPLETED
            logger.info("Run completed after %d epochs", len(self.history))
        except (GeneratorExit, asyncio.CancelledError):
            # consumer closed the stream or its task was cancelled
            if self.running:
                self._discard(TrainingState.CANCELLED)
            raise

    def _prepare(self, partition: Partition, layers: tuple[LayerSpec, ...]):
        n_classes = len(self.class_order)
        standardizer = FeatureStandardizer().fit(feature_matrix(partition.train))
        train_ds = LabDataset(
            standardizer.transform(feature_matrix(partition.train)),
            label_indices(partition.train, self.class_order),
            n_classes,
        )

        valid = None
        if partition.val:
            xs = torch.from_numpy(standardizer.transform(feature_matrix(partition.val)).astype(np.float32))
            valid = (xs, one_hot(label_indices(partition.val, self.class_order), n_classes))
        else:
            warnings.warn("Validation split is empty; validation metrics will be None", EmptySplitWarning, stacklevel=3)

        torch.manual_seed(self.seed)
        model = load_model(train_ds.xs.shape[1], layers, n_classes)
        optimizer = get_optimizer(model, self.learning_rate)
        # BatchNorm cannot train on a trailing batch of one sample
        drop_last = (any(layer.batch_norm for layer in layers)
                     and len(train_ds) > self.batch_size and len(train_ds) % self.batch_size == 1)
        loader = DataLoader(train_ds, batch_size=self.batch_size, shuffle=True, drop_last=drop_last,
                            generator=torch.Generator().manual_seed(self.seed))
        return model, optimizer, loader, standardizer.stats, valid

    def _discard(self, state: TrainingState):
        self.trained = None
        self._cancel_requested = False
        self.state = state

    def _fail(self, message: str, exc: Exception) -> TrainingFailure:
        failure = TrainingFailure("{}: {}".format(message, exc), self.history)
        self.error = failure
        self._discard(TrainingState.FAILED)
        logger.error("%s after %d epochs", failure, len(self.history))
        return failure
