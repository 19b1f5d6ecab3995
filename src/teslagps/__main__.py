import sys

from teslagps.cli import main

sys.exit(main())
