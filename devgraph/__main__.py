import sys

from devgraph.cli.main import main

sys.exit(main())
