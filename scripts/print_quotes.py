from __future__ import annotations

from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from stock_dashboard.config.settings import get_settings
from stock_dashboard.main import build_dashboard
from stock_dashboard.views.stock_table import render_text


def main() -> None:
    dashboard = build_dashboard(get_settings())
    try:
        state = dashboard.mount()
    finally:
        dashboard.fetcher.close()
    print(render_text(state))


if __name__ == "__main__":
    main()
