import sys

from bgsub.cli import main

sys.exit(main())
