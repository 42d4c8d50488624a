#!/usr/bin/env python3
"""
Optimize the Ti6Al4V powder production operating point.

Run from the repository root:
    python scripts/optimize_powder.py --mass 1 --category GW --region EU --diameter 45
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ti64lca.cli import main


if __name__ == "__main__":
    sys.exit(main())
