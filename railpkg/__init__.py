"""railpkg - 轨道模拟内容包（线路 / 车辆 / 其他）元数据管理"""

__version__ = "0.3.0"
