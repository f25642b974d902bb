"""
Wire protocols spoken by devices on top of a transport.
"""
