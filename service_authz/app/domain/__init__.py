"""
Request-level authorization flow: profile building and the route guard.
"""
