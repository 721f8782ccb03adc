import sys

from vcxprops.cli import main

sys.exit(main())
