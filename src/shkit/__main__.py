"""Allow ``python -m shkit``."""

import sys

from shkit.cli import main

sys.exit(main())
