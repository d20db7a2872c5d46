# Ingestion package for the Case Reasoning Engine
"""
Structured document parsers.

Reads known document types into typed structures. A document that
does not parse is left to the graph builder as unstructured material.
"""
