"""Allow ``python -m sidero``."""

import sys

from sidero.main import main

sys.exit(main())
