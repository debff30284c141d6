"""
Identity records shared by every role: model, repository and response projections.
"""
