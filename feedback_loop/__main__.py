import sys

from feedback_loop.pipeline import main

sys.exit(main())
