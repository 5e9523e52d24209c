"""Shared configuration schema, sample type and state enums for the lab pipeline."""

from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator
from enum import Enum
from models.layers import LayerSpec

MIN_SPLIT = 10      # Smallest percentage any split may be configured with
MAX_EPOCHS = 100    # Upper bound on a single run, keeps interactive runs short


class SplitKey(str, Enum):
    """The three disjoint partitions of a dataset."""
    TRAIN = 'train'
    VAL = 'val'
    TEST = 'test'


class TrainingState(Enum):
    """Lifecycle of a single trainer run."""
    IDLE = 1
    RUNNING = 2
    COMPLETED = 3
    FAILED = 4
    CANCELLED = 5


class Sample(BaseModel):
    """One labeled record: raw features plus its precomputed plane coordinates."""
    model_config = ConfigDict(frozen=True)

    id: int
    features: tuple[float, ...]
    plane: tuple[float, float]
    label: str


class SplitPercentages(BaseModel):
    """Requested split sizes in whole percent; each at least MIN_SPLIT, summing to 100."""
    model_config = ConfigDict(frozen=True)

    train: int = Field(..., ge=MIN_SPLIT)
    val: int = Field(..., ge=MIN_SPLIT)
    test: int = Field(..., ge=MIN_SPLIT)

    @model_validator(mode='after')
    def _check_total(self):
        if self.train + self.val + self.test != 100:
            raise ValueError("Split percentages must sum to 100, got {}".format(self.train + self.val + self.test))
        return self


class Config(BaseModel):
    """Strictly validates all tunable knobs of a lab run."""
    dataset: Literal['flowers', 'galaxies']                 # Dataset variant
    dataset_path: str | None = None                         # Optional CSV/JSON records replacing the built-in data
    seed: int                                               # Seed for partitioning, init and sample previews
    splits: SplitPercentages                                # Train/Validate/Test percentages
    epochs: int = Field(..., ge=1, le=MAX_EPOCHS)           # Epochs of training
    batch_size: int = Field(32, gt=0)                       # Mini-batch size
    learning_rate: float | None = Field(None, gt=0.0)       # Adam LR, None uses the variant default
    layers: list[LayerSpec]                                 # Hidden layers in order, output layer is implicit
    grid_size: int = Field(60, ge=2)                        # Decision boundary resolution per axis
    neighbor_count: int = Field(6, gt=0)                    # Neighbours used for plane -> feature interpolation
    preview_count: int = Field(5, ge=0)                     # Test predictions shown after evaluation
    tensorboard: bool = True                                # Write scalars to a TensorBoard run directory
