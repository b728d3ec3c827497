"""
Shared Kernel

Base domain classes, value objects and the message bus used by the
availability app.
"""
