from puzzl.pattern.boxed_var import BoxedVar

__all__ = ["BoxedVar"]
