import importlib
import inspect

import pytest

from tradetime.adapters.catalog_provider import FileCatalogProvider, StaticCatalogProvider
from tradetime.adapters.clock import FixedClock, SystemClock
from tradetime.adapters.telemetry.jsonl import JsonlTelemetry
from tradetime.adapters.telemetry.log import LoggingTelemetry

# Mapping of module -> (ProtocolName, required_methods: {name: arity})
PORT_PROTOCOLS = {
    "tradetime.ports.clock": ("Clock", {"now": 0}),
    "tradetime.ports.catalog_provider": ("CatalogProvider", {"get_catalog": 0}),
    "tradetime.ports.telemetry": ("Telemetry", {"log": -1}),  # variable kwargs
}

ADAPTERS = {
    "Clock": [SystemClock, FixedClock],
    "CatalogProvider": [StaticCatalogProvider, FileCatalogProvider],
    "Telemetry": [JsonlTelemetry, LoggingTelemetry],
}


def _positional(fn) -> list[inspect.Parameter]:
    sig = inspect.signature(fn)
    # remove self / cls
    return [p for p in sig.parameters.values() if p.kind == p.POSITIONAL_OR_KEYWORD][1:]


@pytest.mark.parametrize("module_name,meta", PORT_PROTOCOLS.items())
def test_required_port_signatures(module_name, meta):
    proto_name, methods = meta
    module = importlib.import_module(module_name)
    proto = getattr(module, proto_name)
    assert inspect.isclass(proto), f"{proto_name} not a class"
    for method_name, arity in methods.items():
        fn = getattr(proto, method_name, None)
        assert fn is not None, f"Missing method {method_name} on {proto_name}"
        if arity >= 0:
            params = _positional(fn)
            assert len(params) == arity, f"{proto_name}.{method_name} expected {arity} args got {len(params)}"


@pytest.mark.parametrize("module_name,meta", PORT_PROTOCOLS.items())
def test_adapters_implement_ports(module_name, meta):
    proto_name, methods = meta
    for adapter in ADAPTERS[proto_name]:
        for method_name, arity in methods.items():
            fn = getattr(adapter, method_name, None)
            assert callable(fn), f"{adapter.__name__} lacks {method_name}"
            if arity >= 0:
                assert len(_positional(fn)) == arity
