"""
Data loading and dataset utilities.

This subpackage provides:
- functions to load and validate the train/test tweet CSV files
- immutable partition objects passed between pipeline stages
- a stratified holdout split used for model selection.
"""
