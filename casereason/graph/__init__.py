# Graph package for the Case Reasoning Engine
"""
Evidence graph construction.

Merges every document of a case into one EvidenceGraph: evidence
items, disclosure gaps, cross-document contradictions and readiness.
"""
