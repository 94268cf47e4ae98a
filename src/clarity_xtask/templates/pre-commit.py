#!$python
"""
Git pre-commit hook installed by `xtask install-pre-commit-hook`.

The interpreter path above is written verbatim; install-pre-commit-hook
refuses interpreters whose path contains whitespace.
"""

import sys

from clarity_xtask.cli import main

sys.exit(main())
