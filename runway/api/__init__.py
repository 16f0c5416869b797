"""
Runway Share API

使用例:
    from runway.api.main import create_app
"""
