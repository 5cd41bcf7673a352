"""Run configuration shared by the CLI and the task drivers."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

TASK_MODES = ('mnist', 'boston')


class ConfigError(ValueError):
    """Raised for missing or contradictory run options."""


@dataclass
class Config:
    task_mode: str = ''
    dataset_path: str = ''
    load_model_path: str = ''
    save_model_path: str = ''
    epochs: int = 100
    train: bool = False
    predict: bool = False
    learning_rate: Optional[float] = None
    patience: int = 10

    def validate(self) -> 'Config':
        if not self.task_mode:
            raise ConfigError("Task mode is required. Use --mode <mnist|boston>")
        if self.task_mode not in TASK_MODES:
            raise ConfigError(f"Unknown task mode: {self.task_mode}")
        if self.train == self.predict:
            raise ConfigError("Please specify exactly one of --train or --predict.")
        if self.predict and not self.load_model_path:
            raise ConfigError("Prediction mode requires a model file. Use --load <path_to_model>")
        if self.epochs < 0:
            raise ConfigError(f"--epochs must be non-negative, got {self.epochs}")
        return self
