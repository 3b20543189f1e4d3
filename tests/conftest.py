from __future__ import annotations

import os

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
# Importing ``src.media_catalog.main`` builds the module-level app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
