"""
Lightroom Plugin Toolkit

Reusable building blocks for Lightroom plugin workflows: bounded API retries,
fuzzy collection-name matching, selection filtering and a progress-tracked
batch operation that ties them to a Lightroom catalog and an external service.
"""

__version__ = "1.0.0"
__author__ = "Your Name"
