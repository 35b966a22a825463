"""Allow running as `python -m mingpkg`."""

import sys

from .cli.main import main

sys.exit(main())
