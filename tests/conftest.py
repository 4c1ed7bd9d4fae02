"""
conftest.py – central pytest configuration and test bootstrap.

Pytest imports this module before it collects any test files, which lets us prepare the
environment once:
  1) Extend `sys.path` with the project root directory so absolute-style imports like
     `from core ...` and `from shared ...` resolve without an editable install.
  2) Define safe environment defaults read at import time by the configuration layer:
     file logging is disabled and the completion proxy URL points at an unroutable local
     port, so a test that forgets to stub the remote tier fails fast instead of reaching
     a real service.
"""

import os
import sys
from pathlib import Path

# Ensure project root is on sys.path for direct imports like `core`, `shared`, etc.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Provide required environment defaults for tests
os.environ.setdefault("LOG_FILE_PATH", "")
os.environ.setdefault("REPLY_REMOTE_BASE_URL", "http://127.0.0.1:9")
os.environ.setdefault("REPLY_TIMEOUT_S", "1")
