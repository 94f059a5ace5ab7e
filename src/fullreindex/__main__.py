import sys

from fullreindex.cli import main

sys.exit(main())
