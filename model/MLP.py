"""Configurable feed-forward classifier built from an ordered list of layer specs."""

from typing import Iterable

import torch.nn as nn
from torch.nn import Sequential
from models.layers import LayerSpec


def load_model(input_size: int, layers: Iterable[LayerSpec], n_classes: int) -> Sequential:
    """Create a sequential MLP whose hidden layers mirror `layers`, ending in a softmax output."""
    modules = []
    width = input_size

    for layer in layers:
        modules.append(nn.Linear(width, layer.units))
        _add_activation_function(modules, layer.activation)
        if layer.batch_norm:
            modules.append(nn.BatchNorm1d(layer.units))
        if layer.dropout > 0:
            modules.append(nn.Dropout(layer.dropout))
        width = layer.units

    # Output layer is implicit and not user editable
    modules.append(nn.Linear(width, n_classes))
    _add_activation_function(modules, 'softmax')

    model = nn.Sequential(*modules)

    return model


def _add_activation_function(modules: list, activation: str):
    """Append the requested activation to the provided module list."""
    if activation == 'relu':
        modules.append(nn.ReLU())
    if activation == 'leaky_relu':
        modules.append(nn.LeakyReLU())
    if activation == 'sigmoid':
        modules.append(nn.Sigmoid())
    if activation == 'tanh':
        modules.append(nn.Tanh())
    if activation == 'softmax':
        modules.append(nn.Softmax(dim=1))
