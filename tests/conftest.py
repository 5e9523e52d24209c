"""
Shared fixtures for lab pipeline tests.
"""

import asyncio

import numpy as np
import pytest

from models.common import Sample, SplitPercentages
from models.layers import LayerSpec
from utils.partition import partition_samples
from utils.trainer import Trainer

CLASSES = ("Alpha", "Beta", "Gamma")


def make_samples(per_class: int = 20, seed: int = 0, n_features: int = 4, labels=CLASSES) -> list[Sample]:
    """Well separated gaussian blobs, one per class, with the first two features as plane coordinates."""
    rng = np.random.default_rng(seed)
    samples = []
    for class_index, label in enumerate(labels):
        centre = np.full(n_features, class_index * 3.0)
        for _ in range(per_class):
            features = centre + rng.normal(0.0, 0.5, n_features)
            samples.append(Sample(
                id=len(samples),
                features=tuple(features.tolist()),
                plane=(float(features[0]), float(features[1])),
                label=label,
            ))
    return samples


@pytest.fixture
def samples() -> list[Sample]:
    return make_samples()


@pytest.fixture
def splits() -> SplitPercentages:
    return SplitPercentages(train=60, val=20, test=20)


@pytest.fixture
def partition(samples, splits):
    return partition_samples(samples, 42, splits)


@pytest.fixture
def layers() -> list[LayerSpec]:
    return [LayerSpec(units=8, activation='relu')]


@pytest.fixture
def trainer() -> Trainer:
    return Trainer(CLASSES, learning_rate=0.05, batch_size=16, seed=0)


@pytest.fixture
def trained(trainer, partition, layers):
    """A small classifier trained to completion on the blob dataset."""
    result = asyncio.run(trainer.fit(partition, layers, epochs=30))
    assert result is not None
    return result


@pytest.fixture
def sample_factory():
    """Expose make_samples to tests that need custom sizes."""
    return make_samples


@pytest.fixture
def class_order() -> tuple[str, ...]:
    return CLASSES
