"""
Command line interface for ziprelay
"""
