import sys

from mnist_benchmark.cli import main

sys.exit(main())
