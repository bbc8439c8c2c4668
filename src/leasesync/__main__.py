from __future__ import annotations

from leasesync.ui.cli import entrypoint

if __name__ == "__main__":
    entrypoint()
