"""Allow ``python -m scopelang``."""

from scopelang.main import main

if __name__ == "__main__":
    raise SystemExit(main())
