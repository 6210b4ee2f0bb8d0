"""
Function Module
Lambda execution role and function
"""

from .functions import create_function, create_function_role

__all__ = [
    "create_function",
    "create_function_role",
]
