"""Helpers for training and evaluating softmax MLPs on multi-class problems."""

import torch

PROBABILITY_EPSILON = 1e-7


class NonFiniteLossError(ArithmeticError):
    """Loss became NaN or infinite during a batch."""


def categorical_cross_entropy(probs, y_one_hot):
    """Mean cross-entropy between softmax outputs and one-hot targets."""
    clipped = probs.clamp(PROBABILITY_EPSILON, 1 - PROBABILITY_EPSILON)
    return -(y_one_hot * clipped.log()).sum(dim=1).mean()


def get_batch_correct(output, y_one_hot) -> int:
    """Count samples whose arg-max prediction matches the one-hot label."""
    preds = output.argmax(dim=1)
    return preds.eq(y_one_hot.argmax(dim=1)).sum().item()


def train(model, train_loader, optimizer, loss_function=categorical_cross_entropy) -> tuple[float, float]:
    """Run one epoch of supervised training and report sample-weighted loss/accuracy."""
    loss = 0.0
    correct = 0
    total = 0
    model.train()
    for x, y in train_loader:
        # Forward pass through the current mini-batch
        output = model(x)
        # Clear stale gradients before computing the new ones
        optimizer.zero_grad()
        batch_loss = loss_function(output, y)
        if not torch.isfinite(batch_loss):
            raise NonFiniteLossError("Loss diverged to {}".format(batch_loss.item()))
        batch_loss.backward()
        optimizer.step()
        loss += batch_loss.item() * x.size(0)
        correct += get_batch_correct(output, y)
        total += x.size(0)
    return loss / max(1, total), correct / max(1, total)


def validate(model, xs, ys, loss_function=categorical_cross_entropy) -> tuple[float, float]:
    """Evaluate the model on a full split without gradient tracking."""
    model.eval()
    with torch.no_grad():
        # Only forward-pass is required in evaluation mode
        output = model(xs)
        loss = loss_function(output, ys)
        if not torch.isfinite(loss):
            raise NonFiniteLossError("Validation loss diverged to {}".format(loss.item()))
    return loss.item(), get_batch_correct(output, ys) / max(1, len(xs))


def predict(model, xs) -> torch.Tensor:
    """Arg-max class index per row, computed in evaluation mode."""
    model.eval()
    with torch.no_grad():
        return model(xs).argmax(dim=1)
