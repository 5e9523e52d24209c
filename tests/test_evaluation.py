"""Tests for test-split evaluation."""

import asyncio
from collections import Counter

import numpy as np
import pytest

from models.common import SplitPercentages
from models.errors import EmptySplitWarning
from utils.evaluation import evaluate
from utils.partition import partition_samples
from utils.trainer import Trainer


class TestEvaluate:
    """Tests for evaluate."""

    def test_confusion_matrix_invariants(self, trained, partition) -> None:
        result = evaluate(trained, partition.test, seed=42)

        cm = result.confusion_matrix
        assert cm.shape == (3, 3)
        assert cm.sum() == len(partition.test)
        per_class = Counter(sample.label for sample in partition.test)
        for row, label in enumerate(result.class_order):
            assert cm[row].sum() == per_class.get(label, 0)

    def test_accuracy_matches_diagonal(self, trained, partition) -> None:
        result = evaluate(trained, partition.test, seed=42)

        assert result.test_accuracy == pytest.approx(np.trace(result.confusion_matrix) / len(partition.test))
        assert result.test_accuracy >= 0.9

    def test_sample_preview(self, trained, partition) -> None:
        result = evaluate(trained, partition.test, seed=42)

        assert len(result.sample_predictions) == 5
        test_ids = {sample.id for sample in partition.test}
        for row in result.sample_predictions:
            assert row.sample.id in test_ids
            assert row.correct == (row.predicted == row.sample.label)

    def test_sample_preview_is_seeded(self, trained, partition) -> None:
        first = evaluate(trained, partition.test, seed=3)
        second = evaluate(trained, partition.test, seed=3)

        assert first.sample_predictions == second.sample_predictions

    def test_preview_count(self, trained, partition) -> None:
        result = evaluate(trained, partition.test, seed=1, preview_count=2)

        assert len(result.sample_predictions) == 2

    def test_confusion_cells(self, trained, partition) -> None:
        cells = evaluate(trained, partition.test, seed=42).confusion_cells()

        assert cells[0][1]["actual"] == trained.class_order[0]
        assert cells[0][1]["predicted"] == trained.class_order[1]
        assert sum(cell["value"] for row in cells for cell in row) == len(partition.test)

    def test_empty_test_split(self, trained) -> None:
        with pytest.warns(EmptySplitWarning):
            result = evaluate(trained, (), seed=42)

        assert result.test_accuracy is None
        assert result.confusion_matrix is None
        assert result.confusion_cells() is None
        assert result.sample_predictions == []

    def test_tiny_dataset_with_no_test_samples(self, sample_factory, class_order) -> None:
        samples = sample_factory(per_class=2)[:5]
        partition = partition_samples(samples, 3, SplitPercentages(train=50, val=40, test=10))
        trainer = Trainer(class_order, learning_rate=0.01, seed=0)
        trained = asyncio.run(trainer.fit(partition, [], epochs=2))

        with pytest.warns(EmptySplitWarning):
            result = evaluate(trained, partition.test, seed=3)

        assert result.test_accuracy is None
        assert result.confusion_matrix is None
