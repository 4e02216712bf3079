#!/usr/bin/env python3
"""``regionstats`` pipeline runner.

Usage:
    python scripts/run_regionstats.py scripts/user_config.py
    python scripts/run_regionstats.py scripts/user_config.py --years 2019-2021
    python scripts/run_regionstats.py scripts/user_config.py --join-policy inner --workers 4

Note: User config in scripts/user_config.py, expert defaults in regionstats.schemas.param
"""

import sys

from regionstats.cli import main


if __name__ == "__main__":
    sys.exit(main())
