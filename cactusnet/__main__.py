import sys

from cactusnet.cli import main

sys.exit(main())
