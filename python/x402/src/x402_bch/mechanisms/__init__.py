"""
Payment mechanisms
"""
