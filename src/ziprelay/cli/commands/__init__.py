"""
CLI commands
"""
