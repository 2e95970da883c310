"""Recommendation algorithms for HybridRec.

This package contains the data store abstraction, the three ranking
strategies (collaborative filtering, content-based scoring and popularity)
and the blender that merges them into one recommendation list.
"""
