"""Aggregation module for build and coverage queries.

Folds flat query rows into domain records:
- builds: joined build/coverage/dependency rows -> Build records
- trend: coverage history rows -> time-ordered CoverageSnapshots
"""
