import sys

from evalbridge.cli import main

sys.exit(main())
