"""
Evaluation and analysis utilities.

This subpackage offers:
- metric computations (accuracy, precision, recall, F1-score)
- exploratory and result plots.
"""
