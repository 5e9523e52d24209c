"""Test-split evaluation of a trained classifier."""

import logging
import warnings
from typing import Sequence

import numpy as np
import torch
from sklearn.metrics import accuracy_score, confusion_matrix

from data.LabDataset import label_indices
from models.common import Sample
from models.errors import EmptySplitWarning
from models.results import EvaluationResult, SamplePrediction, TrainedModel
from utils.mlp_training import predict
from utils.sequence import seed_shuffle
from utils.standardize import feature_matrix, standardize

logger = logging.getLogger(__name__)

PREVIEW_COUNT = 5


def predict_samples(trained: TrainedModel, samples: Sequence[Sample]) -> np.ndarray:
    """Standardize with the run's stats and return arg-max class indices."""
    xs = standardize(feature_matrix(samples), trained.feature_stats).astype(np.float32)
    return predict(trained.model, torch.from_numpy(xs)).numpy()


def evaluate(trained: TrainedModel, test_samples: Sequence[Sample], seed: int,
             preview_count: int = PREVIEW_COUNT) -> EvaluationResult:
    """Accuracy, confusion matrix (rows=actual, cols=predicted) and a seeded preview."""
    class_order = trained.class_order
    if not test_samples:
        warnings.warn("Test split is empty; test accuracy and confusion matrix are None",
                      EmptySplitWarning, stacklevel=2)
        return EvaluationResult(test_accuracy=None, confusion_matrix=None, class_order=class_order)

    actual = label_indices(test_samples, class_order)
    predicted = predict_samples(trained, test_samples)

    cm = confusion_matrix(actual, predicted, labels=list(range(len(class_order))))
    accuracy = float(accuracy_score(actual, predicted))
    logger.info("Test accuracy %.4f on %d samples", accuracy, len(test_samples))

    preview_source = list(zip(test_samples, predicted.tolist()))
    preview = [
        SamplePrediction(sample=sample, predicted=class_order[idx], correct=class_order[idx] == sample.label)
        for sample, idx in seed_shuffle(preview_source, seed)[:preview_count]
    ]

    return EvaluationResult(
        test_accuracy=accuracy,
        confusion_matrix=cm,
        class_order=class_order,
        sample_predictions=preview,
    )
