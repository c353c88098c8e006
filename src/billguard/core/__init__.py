"""
Core security components.

This package contains the secure client-state layer:
- Field validators and sanitizers
- Validation orchestration
- Sliding-window rate limiting
- Obfuscation codec and keyed storage
- Security audit logging and metrics
"""
