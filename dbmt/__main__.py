"""Allow ``python -m dbmt``."""

import sys

from .cli import main

sys.exit(main())
