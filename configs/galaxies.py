"""Default lab configuration for the synthetic galaxies dataset."""

dataset="galaxies"                    # Generated orbit/luminosity rings
seed=1337                             # Seed for shuffling, init and previews
splits={"train": 70, "val": 15, "test": 15}   # Percentages, each at least 10
epochs=18                             # Interactive range is 5..30
batch_size=32                         # Mini-batch size
learning_rate=0.005                   # Lower LR, classes overlap more than Iris
layers=[
    {"units": 10, "activation": "relu", "dropout": 0.1, "batch_norm": False},
]                                     # Hidden layers, softmax output is added automatically
grid_size=60                          # Decision boundary cells per axis
neighbor_count=6                      # Neighbours blended when mapping plane points back to features
preview_count=5                       # Test predictions to show
