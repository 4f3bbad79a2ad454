"""
Model definitions for disaster-tweet classification.

This subpackage contains:
- builders for the logistic regression, naive Bayes and random forest models
- the fixed-weight probability ensemble and its threshold search.
"""
