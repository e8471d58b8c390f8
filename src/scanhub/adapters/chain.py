"""Run several adapters back to back for one protocol."""

from collections.abc import Sequence

from scanhub.models import ScanConfig

from .base import AdapterOutput, ScannerAdapter


class ChainedScannerAdapter(ScannerAdapter):
    """Concatenate the outputs of several tools, in order.

    The first tool that raises fails the whole unit.
    """

    def __init__(self, adapters: Sequence[ScannerAdapter], name: str | None = None):
        if not adapters:
            raise ValueError("ChainedScannerAdapter needs at least one adapter")
        self.adapters = list(adapters)
        self.name = name or "+".join(adapter.name for adapter in self.adapters)
        protocols = []
        for adapter in self.adapters:
            protocols.extend(p for p in adapter.protocols if p not in protocols)
        self.protocols = tuple(protocols)

    def scan(self, url: str, config: ScanConfig) -> AdapterOutput:
        output = AdapterOutput()
        for adapter in self.adapters:
            output.extend(adapter.scan(url, config))
        return output

    def close(self) -> None:
        for adapter in self.adapters:
            adapter.close()
