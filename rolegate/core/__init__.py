"""
Core configuration, exceptions, logging and the RoleGate facade.
"""
