"""Method handlers; importing this package registers all of them."""

from __future__ import annotations

from devinfo.rpc.handlers import features, storage, switch, system

__all__ = ["features", "storage", "switch", "system"]
