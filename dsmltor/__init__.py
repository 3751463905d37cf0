"""A Pure-Python library for DSMLv2 requests"""
__version__ = "0.3.0"

__title__ = "dsmltor"
__description__ = "A Pure-Python library for DSMLv2 requests"

__license__ = "MIT"
__author__ = "The dsmltor developers"
__copyright__ = "Copyright (c) 2019-2026 {}".format(__author__)
