"""
Training pipelines.

This subpackage provides the end-to-end pipeline that loads the data, builds
features, fits all classifiers, evaluates them on a holdout split and writes
the submission files.
"""
