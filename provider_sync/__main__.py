"""Entry point for `python -m provider_sync`."""

from provider_sync.tool.provider_sync import main

if __name__ == "__main__":
    main()
