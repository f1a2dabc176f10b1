"""site-backup-ng: site_backup_ng/__main__.py.

Back up every site the current user can access on the hosting platform.
"""

import sys

from .cli.dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
