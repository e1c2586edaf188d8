from textchain.transforms.registry import build_transform_registry, get_transform_registry

__all__ = ["build_transform_registry", "get_transform_registry"]
