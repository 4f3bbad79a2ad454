"""
Text feature extraction utilities.

This subpackage includes:
- hand-crafted per-tweet features (counts, ratios, sentiment tone)
- tokenization and stop-word handling
- vocabulary building with frequency pruning
- document-term encoding and final feature assembly.
"""
