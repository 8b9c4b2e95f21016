"""bubble - 包管理工具基础组件"""

__version__ = "0.1.0"
