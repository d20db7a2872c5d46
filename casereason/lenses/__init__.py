# Lenses package for the Case Reasoning Engine
"""
Practice lenses.

One lens per practice area. Each lens carries exactly five pillars and
classifies every pillar as SAFE, PREMATURE or UNSAFE against the
current evidence presence. Lenses are pure: same context, same verdict.
"""
