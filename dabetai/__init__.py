"""
dabetai API - backend for the dabetai diabetes-care platform.
"""
__version__ = "1.0.0"
