"""
Authentication module for the dabetai platform.

This module provides authentication and authorization functionality including:
- Plain, basic and patient registration
- Two-step onboarding (basic registration, then profile completion)
- Login with JWT access tokens
- Role-based access control
"""
