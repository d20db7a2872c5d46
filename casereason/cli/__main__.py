"""
Case Reasoning Engine CLI entry point.

Usage:
    python -m casereason.cli analyse CASE.json
    python -m casereason.cli pillars CASE.json
    python -m casereason.cli strategies CASE.json
    python -m casereason.cli routes CASE.json --route fight_charge
    python -m casereason.cli demo
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
