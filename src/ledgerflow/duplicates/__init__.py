"""Duplicate detection module."""
from .models import DuplicateGroup, DuplicateMember, DuplicateReport
from .finder import DuplicateFinder, description_similarity

__all__ = ["DuplicateGroup", "DuplicateMember", "DuplicateReport", "DuplicateFinder", "description_similarity"]
