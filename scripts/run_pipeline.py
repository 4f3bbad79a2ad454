"""
Run the disaster-tweet classification pipeline.

This script is a convenience wrapper around
`disaster_tweets.training.pipeline.run_pipeline`, which:

- loads the train/test CSV files configured in config/data.yaml
- derives hand-crafted features and bag-of-words counts
- trains logistic regression, naive Bayes and random forest models
- scores them and the weighted ensemble on a holdout split
- writes one submission file per model under experiments/submissions/

Usage (from project root):

    python -m scripts.run_pipeline
    # or
    python scripts/run_pipeline.py --data-config config/data.yaml
"""

from __future__ import annotations

import argparse

from disaster_tweets.training.pipeline import run_pipeline
from disaster_tweets.utils.training_utils import get_logger, load_train_config


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Train disaster-tweet classifiers and write submission files."
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--ml-config",
        type=str,
        default="config/ml.yaml",
        help="Path to ML config YAML (default: config/ml.yaml).",
    )
    parser.add_argument(
        "--train-config",
        type=str,
        default="config/train.yaml",
        help="Path to global train config YAML (default: config/train.yaml).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    train_cfg = load_train_config(args.train_config)
    logger = get_logger(
        name="run_pipeline",
        config=train_cfg,
        log_file_suffix="run",
    )

    logger.info("=" * 80)
    logger.info("Starting disaster-tweet pipeline.")
    logger.info(
        "Configs: data=%s, ml=%s, train=%s",
        args.data_config,
        args.ml_config,
        args.train_config,
    )

    result = run_pipeline(
        data_config_path=args.data_config,
        ml_config_path=args.ml_config,
        train_config_path=args.train_config,
    )

    logger.info("Holdout metrics:\n%s", result.metrics.drop(columns=["confusion_matrix"]).to_string(index=False))
    logger.info("Ensemble threshold: %.2f", result.threshold)
    for name, path in result.submissions.items():
        logger.info("Submission %-20s -> %s", name, path)

    logger.info("Pipeline run completed.")


if __name__ == "__main__":
    main()
