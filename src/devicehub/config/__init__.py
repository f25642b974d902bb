"""
Loads device configuration files and applies them to a DeviceManager.
"""
