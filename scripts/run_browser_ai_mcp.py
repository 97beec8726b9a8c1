#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

print(
    f"[mcp] api={os.environ.get('BROWSER_AI_API_URL', 'https://browser.ai/api/v1')} | "
    f"project={os.environ.get('PROJECT_NAME', '<unset>')} | "
    f"poll={os.environ.get('BROWSER_AI_POLL_INTERVAL', '3')}s | "
    f"task_timeout={os.environ.get('BROWSER_AI_TASK_TIMEOUT', '0')}s",
    file=sys.stderr,
)

from mcp_servers.browser_ai.main import main  # noqa: E402

if __name__ == "__main__":
    main()
