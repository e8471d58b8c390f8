"""Scanner adapters, one per protocol family."""

from .base import AdapterOutput, HttpScannerAdapter, ScannerAdapter
from .burp import BurpScannerAdapter
from .chain import ChainedScannerAdapter
from .factory import create_default_adapters
from .petep import PetepScannerAdapter
from .zap import ZapScannerAdapter

__all__ = [
    "AdapterOutput",
    "BurpScannerAdapter",
    "ChainedScannerAdapter",
    "HttpScannerAdapter",
    "PetepScannerAdapter",
    "ScannerAdapter",
    "ZapScannerAdapter",
    "create_default_adapters",
]
