"""Utility helpers shared by the training script and the lab pipeline."""

from models.common import Config
import sys
import inspect
import os
import json
from typing import Any, Mapping
import argparse
from pandas import DataFrame
import pandas as pd
from pydantic import ValidationError
from torch.optim import Adam
from torch.nn import Sequential
import datetime
import tomllib
from models.errors import InvalidConfiguration


def get_config(path: str, **overrides) -> Config:
    """Load a configuration file from disk (py/json/toml) into `Config`."""

    def _load(fp: str) -> Mapping[str, Any]:
        ext = os.path.splitext(fp)[1].lower()
        with open(fp, "rb") as f:
            if ext == ".json":
                return json.load(f)
            if ext == ".toml":
                return tomllib.load(f)
            if ext == ".py":
                # Execute a simple Python config file of top-level assignments
                src = f.read().decode("utf-8")
                ns: dict[str, Any] = {}
                exec(compile(src, fp, "exec"), {}, ns)
                return {k: v for k, v in ns.items() if not k.startswith("_") and not callable(v)}
        raise InvalidConfiguration(f"Unsupported config format: {fp}")

    cfg_path = resolve_path(path)
    if not os.path.isfile(cfg_path):
        raise FileNotFoundError(f"Config file not found: {path}")
    cfg_dict = {**_load(cfg_path), **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return Config.model_validate(cfg_dict)
    except ValidationError as exc:
        raise InvalidConfiguration(f"Invalid config {cfg_path}:\n{exc}") from exc


def get_base_path():
    """Directory of the executed script, or None in an interactive session."""
    if not hasattr(sys.modules['__main__'], '__file__'):
        return None

    main_script_file = inspect.getfile(sys.modules['__main__'])
    return os.path.dirname(os.path.abspath(main_script_file))


def resolve_path(p: str) -> str:
    """Find `p` as given, relative to the executed script, or relative to the cwd."""
    candidates = [p]
    main_dir = get_base_path()
    if main_dir:
        candidates.append(os.path.join(main_dir, p))
    candidates.append(os.path.join(os.getcwd(), p))
    for c in candidates:
        if os.path.isfile(c):
            return c
    return p


def get_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments of the training script."""
    parser = argparse.ArgumentParser(description="Train and evaluate a lab classifier")

    parser.add_argument(
        "--config",
        type=str,
        default="configs/flowers.py",
        help="Path to the config file (default: configs/flowers.py)"
    )
    parser.add_argument(
        "--epochs",
        type=int,
        default=None,
        help="Override the epoch count from the config"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the seed from the config"
    )
    parser.add_argument(
        "--no-tensorboard",
        action="store_true",
        default=False,
        help="Do not write TensorBoard scalars"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log pipeline details"
    )

    return parser.parse_args(argv)


def load_data(path: str) -> DataFrame:
    """Read dataset records (CSV or JSON list of objects) into a pandas DataFrame."""
    fp = resolve_path(path)
    if not os.path.isfile(fp):
        raise FileNotFoundError(f"Dataset file not found: {path}")
    if os.path.splitext(fp)[1].lower() == ".json":
        return pd.read_json(fp, orient="records")
    return pd.read_csv(fp)


def get_optimizer(model: Sequential, learning_rate: float) -> Adam:
    """Adam is the only optimizer family the lab trains with."""
    return Adam(model.parameters(), lr=learning_rate)


def generate_run_dir_path() -> str:
    """Timestamped run directory under results/ for TensorBoard logs."""
    base = get_base_path() or os.getcwd()
    return os.path.join(base, "results/{}".format(datetime.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")))
