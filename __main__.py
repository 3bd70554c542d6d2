# SPDX-License-Identifier: GPL-2.0-only
import sys

from unpackbootimg import main

sys.exit(main())
