"""
Prompt construction, type coercion and configuration
"""
