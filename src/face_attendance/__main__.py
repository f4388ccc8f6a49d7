"""Allow running as `python -m face_attendance`."""

import sys

from .cli import main

sys.exit(main())
