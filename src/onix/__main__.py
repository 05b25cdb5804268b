import sys

from onix.cli import main

sys.exit(main())
