"""Allow ``python -m authee``."""

import sys

from authee.cli import main

sys.exit(main())
