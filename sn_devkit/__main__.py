"""Allow ``python -m sn_devkit`` to run the dependency patcher."""

import sys

from sn_devkit.cli import update_deps_main

if __name__ == "__main__":
    sys.exit(update_deps_main())
