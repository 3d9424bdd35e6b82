"""Allow running as ``python -m hpcnic``."""

import sys

from hpcnic.cli import main

sys.exit(main())
