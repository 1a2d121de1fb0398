import sys

from ddconfgen.cli import main

sys.exit(main())
