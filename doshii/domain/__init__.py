"""
Domain layer: types shared by the resource clients.
"""
