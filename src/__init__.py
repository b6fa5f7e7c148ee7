from quart import Quart


def create_app(config=None):
    """Create and configure the Quart application.

    The app hosts configuration, logging and the todo store extensions. It
    registers no routes.
    """
    app = Quart(__name__)

    # Load default configuration
    app.config.from_object("src.config.Config")

    # Apply config overrides
    if config:
        if isinstance(config, dict):
            app.config.update(config)
        else:
            app.config.from_object(config)

    # Initialize extensions (each extension has init_app)
    from src.extensions import init_extensions

    init_extensions(app)

    return app
