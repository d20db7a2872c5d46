# Case Reasoning Engine
# Evidence graph, practice lenses and strategy routes

"""
Core invariant: every verdict the engine returns (pillar status, strategy,
route viability) is a pure function of the documents and facts passed in.

No generative model is called, nothing is cached between invocations, and
the engine never reads the wall clock.
"""

__version__ = "0.1.0"
