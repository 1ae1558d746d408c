"""Allow running the publisher with ``python -m site_publisher``."""

import sys

from .main import main

sys.exit(main())
