"""Allow ``python -m feedback_tracker.cli`` execution."""

import sys

from feedback_tracker.cli.manage import main

sys.exit(main())
