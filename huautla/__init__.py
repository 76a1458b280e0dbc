"""
huautla: read-side data layer for cultivation records.

Folds flat join rows into nested aggregates and expands loaded aggregates
into cycle-safe report trees.
"""
