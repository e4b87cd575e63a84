import sys

from vesting_sync.cli import main

sys.exit(main())
