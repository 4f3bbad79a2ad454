"""
Top-level package for the disaster-tweet classification project.

This package contains modules for:
- loading the labeled (train) and unlabeled (test) tweet partitions
- hand-crafted text features, vocabulary building and bag-of-words encoding
- classical classifiers and their weighted-average ensemble
- the end-to-end pipeline that writes one submission file per variant
- evaluation and plotting helpers
- shared helper functions (config, logging, seeding)
"""
