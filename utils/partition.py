"""Deterministic train/validation/test partitioning and split-percentage helpers."""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

from models.common import MIN_SPLIT, Sample, SplitKey, SplitPercentages
from utils.sequence import seed_shuffle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    """Disjoint, exhaustive split of a sample sequence."""

    train: tuple[Sample, ...]
    val: tuple[Sample, ...]
    test: tuple[Sample, ...]

    def __getitem__(self, key: SplitKey | str) -> tuple[Sample, ...]:
        return getattr(self, SplitKey(key).value)

    def __len__(self):
        return len(self.train) + len(self.val) + len(self.test)

    def counts(self) -> dict[str, int]:
        return {key.value: len(self[key]) for key in SplitKey}


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def split_counts(total: int, splits: SplitPercentages) -> tuple[int, int, int]:
    """Train and val counts are rounded, test absorbs whatever is left."""
    train_count = min(total, _round_half_up(splits.train / 100 * total))
    val_count = min(total - train_count, _round_half_up(splits.val / 100 * total))
    return train_count, val_count, total - train_count - val_count


def partition_samples(samples: Sequence[Sample], seed: int, splits: SplitPercentages) -> Partition:
    """Shuffle `samples` with `seed` and slice them into train, val and test."""
    shuffled = seed_shuffle(samples, seed)
    train_count, val_count, test_count = split_counts(len(shuffled), splits)
    partition = Partition(
        train=tuple(shuffled[:train_count]),
        val=tuple(shuffled[train_count:train_count + val_count]),
        test=tuple(shuffled[train_count + val_count:]),
    )
    logger.debug("Partitioned %d samples with seed %d into %s", len(shuffled), seed, partition.counts())
    return partition


def adjust_train(splits: SplitPercentages, value: float) -> SplitPercentages:
    """Set the train share, shrinking validation if test would drop under the floor."""
    train = min(max(_round_half_up(value), MIN_SPLIT), 100 - MIN_SPLIT * 2)
    val = splits.val
    if 100 - train - val < MIN_SPLIT:
        val = 100 - train - MIN_SPLIT
    val = max(val, MIN_SPLIT)
    return SplitPercentages(train=train, val=val, test=100 - train - val)


def adjust_val(splits: SplitPercentages, value: float) -> SplitPercentages:
    """Set the validation share, shrinking train if test would drop under the floor."""
    val = min(max(_round_half_up(value), MIN_SPLIT), 100 - MIN_SPLIT * 2)
    train = splits.train
    if train + val > 100 - MIN_SPLIT:
        train = 100 - MIN_SPLIT - val
    train = max(train, MIN_SPLIT)
    return SplitPercentages(train=train, val=val, test=100 - train - val)


def split_proportions(splits: SplitPercentages) -> list[dict]:
    """Pie-chart rows in display order."""
    return [
        {"name": "Train", "key": SplitKey.TRAIN.value, "value": splits.train},
        {"name": "Validation", "key": SplitKey.VAL.value, "value": splits.val},
        {"name": "Test", "key": SplitKey.TEST.value, "value": splits.test},
    ]
