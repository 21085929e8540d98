"""Allow ``python -m picgallery``."""

from .cli import main

raise SystemExit(main())
