"""
Application tracking service.

Tracks users' job applications, validates users and jobs against remote
services, and propagates applicant counts to the job service.
"""

__version__ = "0.1.0"
