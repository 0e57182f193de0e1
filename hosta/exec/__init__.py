"""
Entry points sending declared functions and free prompts to a model
"""
