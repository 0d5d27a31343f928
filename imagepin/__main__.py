import sys

from imagepin.main import main

sys.exit(main())
