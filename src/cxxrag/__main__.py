import sys

from cxxrag.cli import main

sys.exit(main())
