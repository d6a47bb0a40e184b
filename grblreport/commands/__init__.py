"""
Commands package for grblreport.

Modules here register their commands with @register_command on import.
"""
