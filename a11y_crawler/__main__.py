# Allows the package to be run as a script using `python -m a11y_crawler`

from __future__ import annotations

import sys

from a11y_crawler.cli import main

if __name__ == "__main__":
    sys.exit(main())
