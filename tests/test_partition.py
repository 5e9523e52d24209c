"""Tests for deterministic dataset partitioning and split helpers."""

import pytest
from pydantic import ValidationError

from models.common import SplitKey, SplitPercentages
from utils.partition import adjust_train, adjust_val, partition_samples, split_counts, split_proportions


class TestPartitionSamples:
    """Tests for partition_samples."""

    @pytest.mark.parametrize("seed", [0, 1, 42, 1337, -5])
    @pytest.mark.parametrize("train,val,test", [(60, 20, 20), (70, 15, 15), (10, 10, 80), (80, 10, 10)])
    def test_complete_and_disjoint(self, sample_factory, seed, train, val, test) -> None:
        samples = sample_factory(per_class=17)
        splits = SplitPercentages(train=train, val=val, test=test)

        partition = partition_samples(samples, seed, splits)

        ids = [sample.id for key in SplitKey for sample in partition[key]]
        assert len(partition) == len(samples)
        assert len(ids) == len(set(ids))
        assert set(ids) == {sample.id for sample in samples}

    def test_reproducible(self, samples, splits) -> None:
        first = partition_samples(samples, 42, splits)
        second = partition_samples(samples, 42, splits)

        assert first == second

    def test_seed_changes_assignment(self, samples, splits) -> None:
        assert partition_samples(samples, 42, splits).train != partition_samples(samples, 7, splits).train

    def test_300_samples_60_20_20(self, sample_factory) -> None:
        samples = sample_factory(per_class=100)

        partition = partition_samples(samples, 42, SplitPercentages(train=60, val=20, test=20))

        assert partition.counts() == {"train": 180, "val": 60, "test": 60}

    def test_test_split_can_round_to_zero(self, sample_factory) -> None:
        samples = sample_factory(per_class=2)[:5]

        partition = partition_samples(samples, 3, SplitPercentages(train=50, val=40, test=10))

        assert partition.counts() == {"train": 3, "val": 2, "test": 0}

    def test_lookup_by_string_key(self, partition) -> None:
        assert partition["val"] == partition.val


class TestSplitCounts:
    """Tests for split_counts rounding."""

    def test_rounds_half_up(self) -> None:
        assert split_counts(5, SplitPercentages(train=50, val=40, test=10)) == (3, 2, 0)

    def test_sum_matches_total(self) -> None:
        for total in range(0, 40):
            counts = split_counts(total, SplitPercentages(train=45, val=45, test=10))
            assert sum(counts) == total
            assert min(counts) >= 0


class TestSplitPercentages:
    """Tests for SplitPercentages validation."""

    def test_rejects_wrong_total(self) -> None:
        with pytest.raises(ValidationError):
            SplitPercentages(train=60, val=20, test=30)

    def test_rejects_below_floor(self) -> None:
        with pytest.raises(ValidationError):
            SplitPercentages(train=85, val=10, test=5)


class TestAdjustSplits:
    """Tests for the slider clamping helpers."""

    def test_train_pushes_validation_down(self) -> None:
        result = adjust_train(SplitPercentages(train=60, val=20, test=20), 85)

        assert (result.train, result.val, result.test) == (80, 10, 10)

    def test_train_clamped_to_floor(self) -> None:
        result = adjust_train(SplitPercentages(train=60, val=20, test=20), 5)

        assert (result.train, result.val, result.test) == (10, 20, 70)

    def test_train_rounds(self) -> None:
        result = adjust_train(SplitPercentages(train=60, val=20, test=20), 62.4)

        assert (result.train, result.val, result.test) == (62, 20, 18)

    def test_val_pushes_train_down(self) -> None:
        result = adjust_val(SplitPercentages(train=60, val=20, test=20), 50)

        assert (result.train, result.val, result.test) == (40, 50, 10)

    def test_val_clamped_to_floor(self) -> None:
        result = adjust_val(SplitPercentages(train=60, val=20, test=20), 3)

        assert (result.train, result.val, result.test) == (60, 10, 30)


class TestSplitProportions:
    """Tests for split_proportions."""

    def test_rows(self) -> None:
        rows = split_proportions(SplitPercentages(train=70, val=15, test=15))

        assert [row["name"] for row in rows] == ["Train", "Validation", "Test"]
        assert [row["value"] for row in rows] == [70, 15, 15]
