import sys

from captive_gateway.cli import main

sys.exit(main())
