"""Conflict detection for InfraKB relationship contributions.

A submitted relationship is compared against existing relationships on the
same component pair and classified as:
  overlaps: duplicate of an existing relationship type
  contradicts: 'conflicts' against any other type
  extends: strengthens an existing relation
"""
