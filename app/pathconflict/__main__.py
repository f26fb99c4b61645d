"""Allow running as ``python -m pathconflict``."""

from pathconflict.cli.main import app

app()
