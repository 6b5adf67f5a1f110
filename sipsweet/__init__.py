"""SipSweet：喝水记录与定时提醒。"""
__version__ = "0.1.0"
