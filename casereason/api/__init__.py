# HTTP API package for the Case Reasoning Engine
"""
FastAPI application exposing the analysis pipeline.

Endpoints:
    GET  /health            — Liveness check
    GET  /lenses            — Registered practice lenses and their pillars
    POST /cases/analyse     — Full analysis envelope
    POST /cases/pillars     — Pillar map only
    POST /cases/strategies  — Normalised strategies only
"""
