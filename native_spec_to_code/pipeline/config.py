"""
Configuration for the specification compiler and the protocol runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ProtocolConfig:
    """Runtime options for generated module hosts."""

    # Number of worker threads executing asynchronous methods
    worker_pool_size: int = 10

    @staticmethod
    def from_dict(d: dict) -> ProtocolConfig:
        """Create a protocol config from a dictionary."""
        config = ProtocolConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert protocol config to a dictionary."""
        return {"worker_pool_size": self.worker_pool_size}


@dataclass
class CompilerConfig:
    """Configuration options for specification compilation."""

    # Package the marker types are imported from
    marker_package: str = "craby-modules"

    # Marker type names exported by the marker package
    module_interface: str = "NativeModule"
    signal_type: str = "Signal"
    registry_name: str = "NativeModuleRegistry"

    # Registry factory methods binding a specification to a module name
    registry_methods: list[str] = field(default_factory=lambda: ["get", "getEnforcing"])

    # Identifiers reserved by the generated runtime glue
    reserved_arg_name: str = "it_"
    reserved_method_name: str = "emit"
    reserved_types: list[str] = field(default_factory=lambda: ["Promise"])

    # Prefix of generator-synthesized nullable wrapper types
    nullable_prefix: str = "Nullable"

    # C++ namespace holding bridged user types
    cxx_namespace: str = "craby::bridging"

    # Parse sources with the TSX grammar
    tsx: bool = False

    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)

    @staticmethod
    def from_dict(d: dict) -> CompilerConfig:
        """Create a config from a dictionary.

        Unknown keys are ignored so older config files keep working.
        """
        config = CompilerConfig()
        for k, v in d.items():
            if k == "protocol":
                config.protocol = ProtocolConfig.from_dict(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "marker_package": self.marker_package,
            "module_interface": self.module_interface,
            "signal_type": self.signal_type,
            "registry_name": self.registry_name,
            "registry_methods": list(self.registry_methods),
            "reserved_arg_name": self.reserved_arg_name,
            "reserved_method_name": self.reserved_method_name,
            "reserved_types": list(self.reserved_types),
            "nullable_prefix": self.nullable_prefix,
            "cxx_namespace": self.cxx_namespace,
            "tsx": self.tsx,
            "protocol": self.protocol.to_dict(),
        }
