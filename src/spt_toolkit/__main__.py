import sys

from spt_toolkit.cli import main

sys.exit(main())
