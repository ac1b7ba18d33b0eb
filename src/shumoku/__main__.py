"""Allow ``python -m shumoku``."""

import sys

from .cli import main

sys.exit(main())
