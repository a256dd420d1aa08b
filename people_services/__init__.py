"""
People services
"""
