"""libhub - 库工作空间管理工具"""

__version__ = "0.3.0"
