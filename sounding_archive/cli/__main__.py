"""Allow ``python -m sounding_archive.cli`` execution."""

import sys

from sounding_archive.cli.main import main

sys.exit(main())
