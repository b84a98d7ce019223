"""
Authorization Gate Module - Black Box Interface

Purpose: Decide whether a request is public or needs a proven identity
Interface: AuthorizationGate.decide(path, method)
Hidden: Pattern compilation, rule ordering

Pure function over immutable configuration; safe for concurrent use.
"""

from .gate import AccessRule, AuthorizationGate, Decision, Disposition, compile_path_pattern

__all__ = ["AccessRule", "AuthorizationGate", "Decision", "Disposition", "compile_path_pattern"]
