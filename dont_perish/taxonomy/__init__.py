"""
Shared vocabularies: risk levels, urgencies, roles, categories, ignore reasons.
"""
