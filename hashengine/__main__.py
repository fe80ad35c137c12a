"""
hashengine CLI - Run with: python -m hashengine
"""

import sys

from hashengine.cli import main

sys.exit(main())
