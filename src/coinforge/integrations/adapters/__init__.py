"""Adapter registry: maps deposit source -> lazy-import class path."""

from coinforge.integrations.config import DepositSourceConfig

AVAILABLE_ADAPTERS: dict[str, str] = {
    "krc20": "coinforge.integrations.adapters.krc20.Krc20Adapter",
    "kaspa": "coinforge.integrations.adapters.kaspa.KaspaAdapter",
}


def import_adapter(dotted_path: str):
    """Import an adapter class from its dotted module path."""
    import importlib

    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)


def build_adapters(configs: list[DepositSourceConfig], client=None) -> list:
    """Instantiate one adapter per enabled source config, sharing *client*."""
    adapters = []
    for config in configs:
        if not config.enabled:
            continue
        adapter_cls = import_adapter(AVAILABLE_ADAPTERS[config.source.value])
        adapters.append(adapter_cls(config, client=client))
    return adapters
