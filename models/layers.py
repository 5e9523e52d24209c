"""User-editable hidden layer descriptions and the ordered list that holds them."""

from typing import Literal, Iterator
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field

Activation = Literal['relu', 'sigmoid', 'tanh', 'leaky_relu', 'softmax']

HEAVY_DROPOUT = 0.5


class LayerSpec(BaseModel):
    """One hidden layer: dense units, activation, optional batch-norm and dropout."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)   # Stable identity across reorders
    units: int = Field(..., gt=0)                           # Width of the dense layer
    activation: Activation = 'relu'                         # Nonlinearity after the dense layer
    dropout: float = Field(0.0, ge=0.0, lt=1.0)             # Dropout rate, 0 disables it
    batch_norm: bool = False                                # Normalize features after activation


class LayerStack:
    """Ordered layer list addressed by id, so reordering never confuses layers."""

    def __init__(self, layers: list[LayerSpec] | None = None):
        self._layers: list[LayerSpec] = []
        for layer in layers or []:
            self.add(layer)

    def __iter__(self) -> Iterator[LayerSpec]:
        return iter(self._layers)

    def __len__(self):
        return len(self._layers)

    def __getitem__(self, layer_id: str) -> LayerSpec:
        return self._layers[self.index_of(layer_id)]

    def index_of(self, layer_id: str) -> int:
        for idx, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return idx
        raise KeyError(layer_id)

    def add(self, layer: LayerSpec | None = None, **fields) -> LayerSpec:
        """Append a layer; without arguments a 6-unit relu layer is added."""
        if layer is None:
            layer = LayerSpec(**{'units': 6, **fields})
        if any(existing.id == layer.id for existing in self._layers):
            raise ValueError("Duplicate layer id: {}".format(layer.id))
        self._layers.append(layer)
        return layer

    def update(self, layer_id: str, **changes) -> LayerSpec:
        """Replace a layer with a re-validated copy carrying `changes`."""
        idx = self.index_of(layer_id)
        merged = {**self._layers[idx].model_dump(), **changes, 'id': layer_id}
        updated = LayerSpec.model_validate(merged)
        self._layers[idx] = updated
        return updated

    def remove(self, layer_id: str) -> LayerSpec:
        return self._layers.pop(self.index_of(layer_id))

    def move(self, layer_id: str, target_id: str):
        """Move `layer_id` to the position currently held by `target_id`."""
        if layer_id == target_id:
            return
        old_index = self.index_of(layer_id)
        new_index = self.index_of(target_id)
        layer = self._layers.pop(old_index)
        self._layers.insert(new_index, layer)

    def snapshot(self) -> tuple[LayerSpec, ...]:
        """Read-only copy handed to a training run."""
        return tuple(self._layers)


def model_hints(layers) -> list[str]:
    """Usability issues worth surfacing before training; none of them block a run."""
    layers = list(layers)
    issues = []
    if not layers:
        issues.append("Add at least one hidden layer so the network can learn non-linear boundaries.")
    if any(layer.activation == 'softmax' for layer in layers[:-1]):
        issues.append("Softmax belongs at the output; on a hidden layer it distorts the decision boundary.")
    if any(layer.dropout > HEAVY_DROPOUT for layer in layers):
        issues.append("Dropout above {} tends to discard useful features; try 0.2-0.3.".format(HEAVY_DROPOUT))
    return issues
