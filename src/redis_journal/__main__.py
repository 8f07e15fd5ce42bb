"""Allow running redis_journal as ``python -m redis_journal``."""

from redis_journal import main

if __name__ == "__main__":
    main()
