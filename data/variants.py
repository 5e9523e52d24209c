"""Built-in dataset variants and conversion of flat records into samples."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Literal

import pandas as pd
from pandas import DataFrame
from sklearn.datasets import load_iris
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from models.common import Sample
from models.errors import InvalidConfiguration
from utils.decision_boundary import NEIGHBOR_COUNT, LinearInverseProjection, NeighborInterpolation, PlaneInverse
from utils.sequence import SeededSequence

PLANE_COLUMNS = ("pcaX", "pcaY")


@dataclass(frozen=True)
class DatasetVariant:
    """Feature layout, class set and training defaults shared by one dataset family."""

    name: str
    feature_names: tuple[str, ...]
    class_order: tuple[str, ...]
    label_column: str
    learning_rate: float
    inverse: Literal['linear', 'neighbors']


FLOWERS = DatasetVariant(
    name="flowers",
    feature_names=("sepalLength", "sepalWidth", "petalLength", "petalWidth"),
    class_order=("Setosa", "Versicolor", "Virginica"),
    label_column="species",
    learning_rate=0.01,
    inverse='linear',
)

GALAXIES = DatasetVariant(
    name="galaxies",
    feature_names=("orbitRadius", "orbitalSpeed", "luminosity", "turbulence"),
    class_order=("Orion", "Andromeda", "Centaurus"),
    label_column="pattern",
    learning_rate=0.005,
    inverse='neighbors',
)

VARIANTS = {variant.name: variant for variant in (FLOWERS, GALAXIES)}


@dataclass(frozen=True)
class LoadedDataset:
    """Samples of one variant plus the linear plane projection when it is known."""

    variant: DatasetVariant
    samples: tuple[Sample, ...]
    projection: LinearInverseProjection | None = None

    def plane_inverse(self, k: int = NEIGHBOR_COUNT) -> PlaneInverse:
        if self.projection is not None:
            return self.projection
        return NeighborInterpolation(self.samples, k=k, n_features=len(self.variant.feature_names))


def get_variant(name: str) -> DatasetVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise InvalidConfiguration("Unknown dataset variant '{}', expected one of {}".format(name, sorted(VARIANTS))) from None


def samples_from_records(records: DataFrame | Iterable[dict], variant: DatasetVariant) -> tuple[Sample, ...]:
    """Validate flat records (features, pcaX, pcaY, label) and turn them into samples.

    Sample ids are the record positions, any `id` column in the input is ignored.
    """
    df = records if isinstance(records, DataFrame) else DataFrame(list(records))
    required = [*variant.feature_names, *PLANE_COLUMNS, variant.label_column]
    missing = [column for column in required if column not in df.columns]
    if missing:
        raise InvalidConfiguration("Dataset records are missing columns: {}".format(missing))

    numeric = df[[*variant.feature_names, *PLANE_COLUMNS]].apply(pd.to_numeric, errors='coerce')
    if numeric.isnull().any().any():
        raise InvalidConfiguration("Dataset records contain non-numeric feature or plane values")

    labels = df[variant.label_column].astype(str)
    unknown = sorted(set(labels) - set(variant.class_order))
    if unknown:
        raise InvalidConfiguration("Unknown {} labels: {}".format(variant.name, unknown))

    n_features = len(variant.feature_names)
    return tuple(
        Sample(id=idx, features=tuple(row[:n_features]), plane=tuple(row[n_features:]), label=label)
        for idx, (row, label) in enumerate(zip(numeric.to_numpy(dtype=float).tolist(), labels))
    )


def load_flowers() -> LoadedDataset:
    """Iris measurements with plane coordinates from a 2-component PCA of scaled features."""
    iris = load_iris()
    scaler = StandardScaler().fit(iris.data)
    pca = PCA(n_components=2).fit(scaler.transform(iris.data))
    plane = pca.transform(scaler.transform(iris.data))

    df = DataFrame(iris.data, columns=list(FLOWERS.feature_names))
    df[PLANE_COLUMNS[0]] = plane[:, 0]
    df[PLANE_COLUMNS[1]] = plane[:, 1]
    df[FLOWERS.label_column] = [FLOWERS.class_order[target] for target in iris.target]

    return LoadedDataset(FLOWERS, samples_from_records(df, FLOWERS), LinearInverseProjection.from_fitted(scaler, pca))


def _fixed3(value: float) -> float:
    # exact ties round away from zero, like a 3-digit fixed-point string
    return float(Decimal(value).quantize(Decimal('0.001'), rounding=ROUND_HALF_UP))


def generate_galaxies(per_class: int = 220, seed: int = 2024) -> list[dict]:
    """Synthetic rings of three galaxy patterns; deterministic for a given seed."""
    rng = SeededSequence(seed)
    offsets = (0.0, 2.1, 4.2)
    records = []
    for class_index, (pattern, offset) in enumerate(zip(GALAXIES.class_order, offsets)):
        for i in range(per_class):
            base_angle = (i / per_class) * math.pi * 2 + offset
            radius = 1.3 + class_index * 0.8 + rng.noise(0.35)
            angle = base_angle + rng.noise(0.25)
            x = radius * math.cos(angle) + rng.noise(0.4)
            y = radius * math.sin(angle) + rng.noise(0.4)
            orbital_speed = radius * (1.2 + rng.noise(0.2)) + class_index * 0.4
            luminosity = math.sin(angle * 2 + class_index * 0.3) + class_index * 0.8 + rng.noise(0.5)
            turbulence = math.cos(angle * 1.5) * 0.7 + class_index * 0.5 + rng.noise(0.6)
            records.append({
                "id": len(records),
                "orbitRadius": _fixed3(radius),
                "orbitalSpeed": _fixed3(orbital_speed),
                "luminosity": _fixed3(luminosity),
                "turbulence": _fixed3(turbulence),
                "pcaX": _fixed3(x),
                "pcaY": _fixed3(y),
                "pattern": pattern,
            })
    return records


def load_galaxies(per_class: int = 220, seed: int = 2024) -> LoadedDataset:
    return LoadedDataset(GALAXIES, samples_from_records(generate_galaxies(per_class, seed), GALAXIES))


def load_variant(name: str, records: DataFrame | Iterable[dict] | None = None) -> LoadedDataset:
    """Built-in data for `name`, or user records interpreted with that variant's layout.

    User records carry precomputed plane coordinates from an unknown projection,
    so they always use neighbour interpolation for the decision boundary.
    """
    variant = get_variant(name)
    if records is not None:
        return LoadedDataset(variant, samples_from_records(records, variant))
    if variant is FLOWERS:
        return load_flowers()
    return load_galaxies()
