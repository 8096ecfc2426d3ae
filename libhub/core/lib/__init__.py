"""库注册表与依赖解析

- models.py: 数据模型
- registry.py: 远程注册表客户端
- resolver.py: 传递依赖解析
"""

from libhub.core.lib.models import LibraryDescriptor, Registry, Resolution
from libhub.core.lib.registry import RegistryClient, parse_registry
from libhub.core.lib.resolver import DependencyResolver, ResolutionContext

__all__ = [
    "LibraryDescriptor",
    "Registry",
    "Resolution",
    "RegistryClient",
    "parse_registry",
    "DependencyResolver",
    "ResolutionContext",
]
