"""Entry point for running FocusPie as a module: python -m focuspie"""

import sys
from .ui import main

if __name__ == "__main__":
    sys.exit(main())
