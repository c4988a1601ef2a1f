"""Allow ``python -m niabridge``."""

from niabridge.cli import main

raise SystemExit(main())
