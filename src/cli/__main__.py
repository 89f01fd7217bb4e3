"""Allow ``python -m src.cli`` execution (delegates to :mod:`src.cli.dig`)."""

import sys

from src.cli.dig import main

sys.exit(main())
