import sys

from psgate.format_gate import main


sys.exit(main())
