"""Allow ``python -m hurricaneviewer``."""

from hurricaneviewer.run_viewer import main

if __name__ == "__main__":
    raise SystemExit(main())
