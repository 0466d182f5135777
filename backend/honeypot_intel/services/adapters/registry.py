# backend/honeypot_intel/services/adapters/registry.py
from typing import Dict

from honeypot_intel.services.adapters.base import HoneypotDataAdapter
from honeypot_intel.services.adapters.local_adapter import local_adapter
from honeypot_intel.services.adapters.remote_adapter import RemoteAdapter

adapters: Dict[str, HoneypotDataAdapter] = {
    "local": local_adapter,
    "demo": local_adapter,
    "remote": RemoteAdapter(),
}


def get_adapter(name: str) -> HoneypotDataAdapter:
    """Adapter by name; unknown names get the local adapter."""
    return adapters.get(name, local_adapter)
