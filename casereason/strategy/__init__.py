# Strategy package for the Case Reasoning Engine
"""
Strategy generation, the fight engine and the normalizer.

Modules:
    generator   — candidate defence strategies with provisional flags
    facts       — route archetypes and the evidence facts they read
    routes      — viability, attack paths, kill switches, pivot plans
    artifacts   — fill-in templates per route
    normalizer  — stable output shape and vocabulary leakage screening
"""
