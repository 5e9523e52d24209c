"""PyTorch dataset wrapper around standardized lab samples."""

from torch.utils.data import Dataset
import numpy as np
import torch
from models.errors import InvalidConfiguration


def label_indices(samples, class_order) -> np.ndarray:
    """Map sample labels to their position in `class_order`."""
    lookup = {label: idx for idx, label in enumerate(class_order)}
    unknown = sorted({sample.label for sample in samples if sample.label not in lookup})
    if unknown:
        raise InvalidConfiguration("Unknown class labels {}; expected one of {}".format(unknown, list(class_order)))
    return np.asarray([lookup[sample.label] for sample in samples], dtype=np.int64)


def one_hot(label_indices: np.ndarray, n_classes: int) -> torch.Tensor:
    """Encode integer labels as float one-hot rows."""
    return torch.nn.functional.one_hot(torch.as_tensor(label_indices, dtype=torch.long), n_classes).float()


class LabDataset(Dataset):
    """Materialize feature tensors and one-hot targets from already standardized arrays."""

    def __init__(self, features: np.ndarray, label_indices: np.ndarray, n_classes: int):
        self.xs = torch.from_numpy(np.asarray(features, dtype=np.float32))
        self.ys = one_hot(label_indices, n_classes)

    def __getitem__(self, idx):
        """Return the feature tensor and one-hot label for a given row index."""
        x = self.xs[idx]
        y = self.ys[idx]
        return x, y

    def __len__(self):
        """Length of the dataset (number of rows)."""
        return len(self.xs)
