"""
Error taxonomy shared by every mojokit layer.

ConfigurationError is raised synchronously at the offending call and is never
caught internally. RuntimeExecutionError is what concrete unit logic raises;
development configurations log and swallow it at the unit dispatch wrapper.
Abstract hooks raise the builtin NotImplementedError.
"""


class MojoError(Exception):
    """Base exception for mojokit errors"""
    pass


class ConfigurationError(MojoError, ValueError):
    """Raised for invalid or missing arguments and unresolved references"""
    pass


class RuntimeExecutionError(MojoError, RuntimeError):
    """Raised by concrete unit logic while executing"""
    pass
