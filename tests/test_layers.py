"""Tests for layer specs, the id-keyed layer stack and model hints."""

import pytest
from pydantic import ValidationError

from models.layers import LayerSpec, LayerStack, model_hints


class TestLayerSpec:
    """Tests for LayerSpec validation."""

    def test_defaults(self) -> None:
        layer = LayerSpec(units=4)

        assert layer.activation == 'relu'
        assert layer.dropout == 0.0
        assert layer.batch_norm is False
        assert layer.id

    def test_ids_are_unique(self) -> None:
        assert LayerSpec(units=4).id != LayerSpec(units=4).id

    @pytest.mark.parametrize("fields", [
        {"units": 0},
        {"units": 4, "dropout": 1.0},
        {"units": 4, "dropout": -0.1},
        {"units": 4, "activation": "gelu"},
    ])
    def test_rejects_invalid(self, fields) -> None:
        with pytest.raises(ValidationError):
            LayerSpec(**fields)

    def test_is_immutable(self) -> None:
        layer = LayerSpec(units=4)

        with pytest.raises(ValidationError):
            layer.units = 8


class TestLayerStack:
    """Tests for LayerStack."""

    def test_add_default_layer(self) -> None:
        stack = LayerStack()

        layer = stack.add()

        assert layer.units == 6
        assert len(stack) == 1

    def test_duplicate_id_rejected(self) -> None:
        layer = LayerSpec(units=3)
        stack = LayerStack([layer])

        with pytest.raises(ValueError):
            stack.add(layer)

    def test_update_keeps_identity_and_position(self) -> None:
        first, second = LayerSpec(units=3), LayerSpec(units=5)
        stack = LayerStack([first, second])

        updated = stack.update(first.id, units=12, activation='tanh')

        assert updated.id == first.id
        assert [layer.units for layer in stack] == [12, 5]
        assert stack[first.id].activation == 'tanh'

    def test_update_validates(self) -> None:
        layer = LayerSpec(units=3)
        stack = LayerStack([layer])

        with pytest.raises(ValidationError):
            stack.update(layer.id, dropout=2.0)

    def test_move_reorders_by_id(self) -> None:
        a, b, c = LayerSpec(units=1), LayerSpec(units=2), LayerSpec(units=3)
        stack = LayerStack([a, b, c])

        stack.move(c.id, a.id)

        assert [layer.id for layer in stack] == [c.id, a.id, b.id]

        stack.move(c.id, b.id)

        assert [layer.id for layer in stack] == [a.id, b.id, c.id]

    def test_remove(self) -> None:
        a, b = LayerSpec(units=1), LayerSpec(units=2)
        stack = LayerStack([a, b])

        stack.remove(a.id)

        assert [layer.id for layer in stack] == [b.id]
        with pytest.raises(KeyError):
            stack.remove(a.id)

    def test_snapshot_is_detached(self) -> None:
        stack = LayerStack([LayerSpec(units=1)])

        snapshot = stack.snapshot()
        stack.add(LayerSpec(units=2))

        assert len(snapshot) == 1
        assert isinstance(snapshot, tuple)


class TestModelHints:
    """Tests for model_hints."""

    def test_no_issues(self) -> None:
        assert model_hints([LayerSpec(units=8)]) == []

    def test_empty_stack(self) -> None:
        assert len(model_hints([])) == 1

    def test_hidden_softmax_flagged(self) -> None:
        layers = [LayerSpec(units=8, activation='softmax'), LayerSpec(units=4)]

        assert any("Softmax" in hint for hint in model_hints(layers))

    def test_last_hidden_softmax_not_flagged(self) -> None:
        assert model_hints([LayerSpec(units=8), LayerSpec(units=4, activation='softmax')]) == []

    def test_heavy_dropout_flagged(self) -> None:
        assert any("Dropout" in hint for hint in model_hints([LayerSpec(units=8, dropout=0.7)]))
