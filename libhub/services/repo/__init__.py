"""工作空间仓库操作

- scanner.py: 检出目录扫描
- git_output.py: git 输出解析
- runner.py: 单仓库 git 操作
- version_file.py: library.json 读写
- packer.py: 打包
"""

from libhub.services.repo.packer import pack_libraries
from libhub.services.repo.runner import RepoOperationRunner
from libhub.services.repo.scanner import RepositoryScanner
from libhub.services.repo.version_file import increase_patch_version, load_version_file

__all__ = [
    "RepositoryScanner",
    "RepoOperationRunner",
    "pack_libraries",
    "increase_patch_version",
    "load_version_file",
]
