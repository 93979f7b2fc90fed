import sys

from gitdraft.cli import main

sys.exit(main())
