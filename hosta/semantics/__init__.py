"""
Semantic operators
"""
