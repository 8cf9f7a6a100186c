import sys

from tripledes.cli import main

sys.exit(main())
