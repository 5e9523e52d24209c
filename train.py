"""End-to-end lab run from the command line.

1. Partition the configured dataset and train the configured MLP, printing and
   logging (TensorBoard) one line of metrics per epoch.
2. Evaluate on the test split and rasterize the decision boundary over the
   visualization plane.
"""

import asyncio
import logging
import sys

import numpy as np
from torch.utils.tensorboard import SummaryWriter

from models.errors import LabError, TrainingFailure
from utils.common import generate_run_dir_path, get_args, get_config
from utils.lab import Lab


async def main(argv: list[str] | None = None) -> int:
    args = get_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        cfg = get_config(args.config, epochs=args.epochs, seed=args.seed,
                         tensorboard=False if args.no_tensorboard else None)
        lab = Lab(cfg)
        partition = lab.apply_data()
    except (LabError, FileNotFoundError) as exc:
        print("Configuration error: {}".format(exc))
        return 2

    print("Loaded Configuration: {}".format(cfg))
    print("Split sizes: {}".format(partition.counts()))
    for hint in lab.hints():
        print("Hint: {}".format(hint))

    writer = SummaryWriter(log_dir=generate_run_dir_path()) if cfg.tensorboard else None
    if writer is not None:
        writer.add_text(tag='mlp', text_string='MLP trained with these configs: {}'.format(cfg))

    try:
        async for snapshot in lab.train():
            print('Epoch: {}'.format(snapshot.epoch))
            print('Train - Loss: {:.4f} Accuracy: {:.4f}'.format(snapshot.loss, snapshot.accuracy))
            if snapshot.val_loss is not None:
                print('Valid - Loss: {:.4f} Accuracy: {:.4f}'.format(snapshot.val_loss, snapshot.val_accuracy))
            if writer is not None:
                writer.add_scalar("MLP/Loss/train", snapshot.loss, snapshot.epoch)
                writer.add_scalar("MLP/Accuracy/train", snapshot.accuracy, snapshot.epoch)
                if snapshot.val_loss is not None:
                    writer.add_scalar("MLP/Loss/valid", snapshot.val_loss, snapshot.epoch)
                    writer.add_scalar("MLP/Accuracy/valid", snapshot.val_accuracy, snapshot.epoch)
    except TrainingFailure as exc:
        print("Training failed after {} epochs: {}".format(len(exc.history), exc))
        if writer is not None:
            writer.close()
        return 1

    evaluation = lab.evaluate()
    if evaluation.test_accuracy is None:
        print("Test split is empty, skipping evaluation")
    else:
        print("MLP Confusion Matrix (rows=true, cols=pred) for {}:".format(list(evaluation.class_order)))
        print(evaluation.confusion_matrix)
        print(f"MLP Test Accuracy: {evaluation.test_accuracy:.4f}")
        for row in evaluation.sample_predictions:
            print("Sample {}: actual {} predicted {} {}".format(
                row.sample.id, row.sample.label, row.predicted, "ok" if row.correct else "WRONG"))

    grid = lab.rasterize()
    shares = np.bincount(grid.grid.ravel(), minlength=len(grid.class_order)) / max(1, grid.grid.size)
    print("Decision grid {}x{} over x=[{:.2f}, {:.2f}] y=[{:.2f}, {:.2f}], class shares: {}".format(
        *grid.grid.shape, grid.min_x, grid.max_x, grid.min_y, grid.max_y,
        {label: round(float(share), 3) for label, share in zip(grid.class_order, shares)}))

    if writer is not None:
        if evaluation.test_accuracy is not None:
            writer.add_scalar("MLP/Accuracy/test", evaluation.test_accuracy, cfg.epochs)
            writer.add_text(tag='confusion_matrix', text_string=str(evaluation.confusion_cells()))
        writer.flush()
        writer.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
