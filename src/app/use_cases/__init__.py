"""
Use Cases

Organized by domain folder:
- auth/: Registration, email verification, password recovery and login
"""
