"""Default lab configuration for the Iris flowers dataset."""

dataset="flowers"                     # Built-in Iris measurements
seed=42                               # Seed for shuffling, init and previews
splits={"train": 60, "val": 20, "test": 20}   # Percentages, each at least 10
epochs=30                             # Fixed budget for the small dataset
batch_size=32                         # Mini-batch size
learning_rate=0.01                    # Adam LR, converges within 30 epochs on 90 samples
layers=[
    {"units": 8, "activation": "relu", "dropout": 0.0, "batch_norm": False},
]                                     # Hidden layers, softmax output is added automatically
grid_size=60                          # Decision boundary cells per axis
preview_count=5                       # Test predictions to show
