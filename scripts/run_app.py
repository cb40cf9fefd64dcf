#!/usr/bin/env python
"""
Run the Streamlit shipping calculator.

Usage:
    python scripts/run_app.py [--offline] [streamlit args...]

--offline disables the remote pricing service so every quote comes from
the local formula.
"""
import os
import subprocess
import sys
from pathlib import Path


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'shipping_estimator' / 'ui' / 'app_streamlit.py'

    if not ui_path.exists():
        print(f"ERROR: UI module not found at {ui_path}")
        sys.exit(1)

    env = os.environ.copy()
    if '--offline' in argv:
        argv.remove('--offline')
        env['SHIPPING_ESTIMATOR_PRICING_SERVICE_URL'] = ''

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), *argv]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nApplication stopped.")


if __name__ == "__main__":
    main()
