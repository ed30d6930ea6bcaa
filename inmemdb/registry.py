import inspect


def db_command(name):
    """Mark a store method as the handler for canonical command ``name``."""
    def decorator(func):
        func.command_name = name
        return func
    return decorator


def build_registry(db):
    """Map canonical command names to the bound handlers of ``db``."""
    registry = {}
    for _, method in inspect.getmembers(db, inspect.ismethod):
        name = getattr(method, "command_name", None)
        if name is None:
            continue
        if name in registry:
            raise ValueError(f"duplicate handler for command {name!r}")
        registry[name] = method
    return registry
