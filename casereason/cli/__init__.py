# CLI package for the Case Reasoning Engine
"""
Command-line interface for analysing case files locally.

Commands:
    casereason analyse    — Full analysis of a case file
    casereason pillars    — Pillar map for the case's practice lens
    casereason strategies — Normalised strategies
    casereason routes     — Fight-engine route plans
    casereason demo       — Analyse the built-in sample case
"""
