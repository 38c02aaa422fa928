"""
Directory Service application package.
"""
