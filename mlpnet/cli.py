"""Command-line entry point: ``mlpnet --mode {mnist|boston} (--train|--predict) ...``"""
from __future__ import annotations
import argparse
import sys
from typing import List, Optional, Tuple

from .config import Config, ConfigError, TASK_MODES
from .tasks import run_task


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mlpnet',
        description='Train or evaluate a small dense network on MNIST or Boston housing CSV data.',
    )
    parser.add_argument('--mode', choices=TASK_MODES, required=True, help='task to run')
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument('--train', action='store_true', help='train a model')
    action.add_argument('--predict', action='store_true', help='evaluate a saved model')
    parser.add_argument('--epochs', type=int, default=100, help='training epochs (default: 100)')
    parser.add_argument('--dataset', default='', help='path to the CSV dataset')
    parser.add_argument('--load', default='', help='weights file to load')
    parser.add_argument('--save', default='', help='weights file to write after training')
    parser.add_argument('--lr', type=float, default=None, help='learning rate (task default if omitted)')
    parser.add_argument('--patience', type=int, default=10, help='early stopping patience (mnist)')
    parser.add_argument('--quiet', action='store_true', help='hide the progress bar and per-epoch output')
    return parser


def parse_config(argv: Optional[List[str]] = None) -> Tuple[Config, bool]:
    args = build_parser().parse_args(argv)
    return Config(
        task_mode=args.mode,
        dataset_path=args.dataset,
        load_model_path=args.load,
        save_model_path=args.save,
        epochs=args.epochs,
        train=args.train,
        predict=args.predict,
        learning_rate=args.lr,
        patience=args.patience,
    ), args.quiet


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config, quiet = parse_config(argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; this tool reports 1
        return 0 if e.code == 0 else 1
    try:
        config.validate()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return run_task(config, verbose=not quiet)


if __name__ == '__main__':
    sys.exit(main())
