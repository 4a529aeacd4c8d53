"""Allow ``python -m idlekit_engine``."""

from idlekit_engine.cli import main

if __name__ == "__main__":
    main()
