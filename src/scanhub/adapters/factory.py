"""Adapter registry helpers."""

from scanhub.config import Settings
from scanhub.models import Protocol

from .base import ScannerAdapter
from .burp import BurpScannerAdapter
from .chain import ChainedScannerAdapter
from .petep import PetepScannerAdapter
from .zap import ZapScannerAdapter


def create_default_adapters(settings: Settings) -> dict[Protocol, ScannerAdapter]:
    """Return the standard protocol -> adapter registry.

    HTTP and HTTPS run ZAP then Burp; FTP runs PETEP.
    """
    zap = ZapScannerAdapter(
        settings.zap.base_url, api_key=settings.zap.api_key, timeout=settings.zap.timeout
    )
    burp = BurpScannerAdapter(
        settings.burp.base_url, api_key=settings.burp.api_key, timeout=settings.burp.timeout
    )
    petep = PetepScannerAdapter(settings.petep.base_url, timeout=settings.petep.timeout)
    web = ChainedScannerAdapter([zap, burp])
    return {
        Protocol.HTTP: web,
        Protocol.HTTPS: web,
        Protocol.FTP: petep,
    }
