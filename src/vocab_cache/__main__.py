import sys

from vocab_cache.main import main

sys.exit(main())
