import sys

from long_short_ratio.cli import main


sys.exit(main())
