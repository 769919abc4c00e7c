"""Allow running the audit with `python -m image_rot`."""

import sys

from .cli import main

sys.exit(main())
