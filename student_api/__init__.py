from .lifecycle import ApplicationLifecycle


def create_app(**kwargs):
    """Build a fully initialized application outside the cached lifecycle."""
    return ApplicationLifecycle(**kwargs).create_application()
